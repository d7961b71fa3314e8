from typing import TypeVar, Generic, Type, Any, Optional, Dict
from sqlalchemy.orm import Session
from studio.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)

class CRUDBase(Generic[ModelType]):
    """Acesso a dados sem commit: quem controla a transação é o serviço."""

    def __init__(self, model: Type[ModelType]): self.model = model

    def get(self, db: Session, id: Any, *, fresh: bool = False) -> Optional[ModelType]:
        # fresh=True recarrega colunas alteradas por UPDATE em lote
        return db.get(self.model, id, populate_existing=fresh)

    def add(self, db: Session, data: Dict[str, Any]) -> ModelType:
        obj = self.model(**data)
        db.add(obj); db.flush()
        return obj
