from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Borne des prix représentables en nombre JSON (float)
MAX_PRICE = Decimal("1e308")


class ProductCreate(BaseModel):
    # Champs optionnels : les règles métier (nom requis, prix > 0) sont
    # vérifiées par le handler pour remonter toutes les erreurs d'un coup
    name: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, allow_inf_nan=False, gt=-MAX_PRICE, lt=MAX_PRICE)


class ProductUpdate(BaseModel):
    # Mêmes champs que la création : un champ absent ne bloque pas la
    # recherche du produit, le handler applique les valeurs par défaut
    name: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, allow_inf_nan=False, gt=-MAX_PRICE, lt=MAX_PRICE)


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float


class ProblemDetails(BaseModel):
    """RFC 9457 problem details body."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = "about:blank"
    title: str
    status: int
    detail: Optional[str] = None
    instance: Optional[str] = None
    errors: Optional[Dict[str, List[str]]] = None
    trace_id: Optional[str] = Field(default=None, alias="traceId")
    request_id: Optional[str] = Field(default=None, alias="requestId")

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
