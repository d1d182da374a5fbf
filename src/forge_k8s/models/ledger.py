# src/forge_k8s/models/ledger.py

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LedgerInformation(BaseModel):
    """
    Ledger summary returned by the node REST API index (`GET /v1`).

    The API encodes 64-bit integers as JSON strings; pydantic coerces them.
    """

    model_config = ConfigDict(extra="ignore")

    chain_id: int = Field(..., description="Chain identifier")
    epoch: int = Field(..., description="Current epoch")
    ledger_version: int = Field(..., description="Latest committed ledger version")
    oldest_ledger_version: int = Field(0, description="Oldest ledger version still stored")
    ledger_timestamp: int = Field(..., description="Ledger timestamp in microseconds")
    block_height: Optional[int] = Field(None, description="Latest block height")
    oldest_block_height: Optional[int] = Field(None, description="Oldest stored block height")
    node_role: Optional[str] = Field(None, description="'validator' or 'full_node'")
