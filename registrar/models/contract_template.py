from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from registrar.db.base_class import Base, SoftDeleteMixin, TimestampMixin


class ContractTemplate(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "contract_templates"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def render(self, data: dict) -> str:
        """Replace every ``{{key}}`` marker in the content with ``data[key]``."""
        result = self.content
        for key, value in data.items():
            result = result.replace("{{" + key + "}}", str(value))
        return result
