from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

CPF_PATTERN = r"^[0-9]{11}$"


class ConfirmRequest(BaseModel):
    cpf: str = Field(pattern=CPF_PATTERN)

    model_config = ConfigDict(extra="forbid")


class ConfirmResponse(BaseModel):
    inscricao: str
    nome: str
    dia: str
    data: str
    hora: str


class HealthResponse(BaseModel):
    status: str
    ready: bool
    attendees: int
    days: Dict[str, bool]
    built_at: Optional[str] = None
