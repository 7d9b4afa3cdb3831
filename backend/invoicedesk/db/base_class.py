from sqlalchemy.orm import declarative_base, declared_attr
from typing import Any

class CustomBase:
    # Table name defaults to the pluralized class name; models override it
    @declared_attr
    def __tablename__(cls) -> str:
        return cls.__name__.lower() + "s"

Base: Any = declarative_base(cls=CustomBase)
