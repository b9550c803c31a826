"""SQLAlchemy ORM models for currencies, provider modules and assignments."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    false,
    func,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fxregistry.database import Base


class Currency(Base):
    """A currency known to the registry, optionally flagged as the default (base) one."""

    __tablename__ = "currencies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String(3), unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    is_default: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    conversion_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(20, 10), nullable=True)
    rate_updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    assignment: Mapped[Optional["CurrencyProviderAssignment"]] = relationship(
        "CurrencyProviderAssignment",
        back_populates="currency",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Currency code={self.code} default={self.is_default}>"


class ProviderModule(Base):
    """An installed extension; rate providers are the ones hooked on the rate hook."""

    __tablename__ = "provider_modules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(120), nullable=False)
    version: Mapped[str] = mapped_column(String(32), nullable=False, default="1.0.0")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    installed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    hooks: Mapped[list["ModuleHook"]] = relationship(
        "ModuleHook",
        back_populates="module",
        cascade="all, delete-orphan",
        order_by="ModuleHook.position",
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<ProviderModule name={self.name} version={self.version} active={self.active}>"


class ModuleHook(Base):
    """Registration of a module on a named hook; position gives the listing order."""

    __tablename__ = "module_hooks"
    __table_args__ = (
        UniqueConstraint("module_id", "hook_name", name="uq_module_hooks_module_hook"),
        Index("ix_module_hooks_hook_position", "hook_name", "position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    module_id: Mapped[int] = mapped_column(
        ForeignKey("provider_modules.id", ondelete="CASCADE"), nullable=False
    )
    hook_name: Mapped[str] = mapped_column(String(64), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    module: Mapped["ProviderModule"] = relationship("ProviderModule", back_populates="hooks")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<ModuleHook module={self.module_id} hook={self.hook_name} position={self.position}>"


class CurrencyProviderAssignment(Base):
    """The provider module chosen to supply rates for one currency (one row per currency)."""

    __tablename__ = "currency_provider_assignments"

    currency_id: Mapped[int] = mapped_column(
        ForeignKey("currencies.id", ondelete="CASCADE"), primary_key=True
    )
    module_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("provider_modules.id", ondelete="SET NULL"), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    currency: Mapped["Currency"] = relationship("Currency", back_populates="assignment")
    module: Mapped[Optional["ProviderModule"]] = relationship("ProviderModule")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<CurrencyProviderAssignment currency={self.currency_id} module={self.module_id}>"
