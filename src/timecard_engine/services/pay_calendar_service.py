"""Pay calendar configuration management and schedule lookup."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.calculators.pay_schedule import PayScheduleCalculator
from timecard_engine.calculators.types import PeriodBounds, PeriodDescriptor
from timecard_engine.models import PayCalendarConfig


class ConfigurationNotFoundError(Exception):
    """Raised when a pay calendar configuration does not exist."""

    def __init__(self, config_id: int):
        self.config_id = config_id
        super().__init__(f"Pay calendar configuration {config_id} not found")


class PayCalendarValidationError(Exception):
    """Raised when pay-date entries are malformed or overlap."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class PayCalendarService:
    """Service for per-district pay calendar configurations.

    Invariants:
    1. At most one active configuration per district (activating one
       deactivates the rest; a partial unique index backs this up)
    2. Pay-date entries are stored sorted and never overlap
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        district_id: int,
        name: str,
        pay_dates: list[dict[str, Any]],
        school_year: str | None = None,
        is_active: bool = False,
    ) -> PayCalendarConfig:
        normalized = self._normalize(pay_dates)
        if is_active:
            await self._deactivate_district(district_id)

        config = PayCalendarConfig(
            district_id=district_id,
            name=name,
            school_year=school_year,
            pay_dates=normalized,
            is_active=is_active,
        )
        self.session.add(config)
        await self.session.flush()
        return config

    async def get(self, config_id: int) -> PayCalendarConfig:
        config = await self.session.get(PayCalendarConfig, config_id)
        if config is None:
            raise ConfigurationNotFoundError(config_id)
        return config

    async def list_for_district(self, district_id: int) -> list[PayCalendarConfig]:
        result = await self.session.execute(
            select(PayCalendarConfig)
            .where(PayCalendarConfig.district_id == district_id)
            .order_by(PayCalendarConfig.created_at.desc(), PayCalendarConfig.id.desc())
        )
        return list(result.scalars().all())

    async def get_active(self, district_id: int) -> PayCalendarConfig | None:
        result = await self.session.execute(
            select(PayCalendarConfig)
            .where(
                PayCalendarConfig.district_id == district_id,
                PayCalendarConfig.is_active.is_(True),
            )
            .order_by(PayCalendarConfig.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def update(self, config_id: int, **changes: Any) -> PayCalendarConfig:
        """Apply partial changes (name, school_year, pay_dates, is_active)."""
        config = await self.get(config_id)

        if changes.get("pay_dates") is not None:
            config.pay_dates = self._normalize(changes["pay_dates"])
        if changes.get("name") is not None:
            config.name = changes["name"]
        if "school_year" in changes:
            config.school_year = changes["school_year"]
        if changes.get("is_active") is not None:
            if changes["is_active"] and not config.is_active:
                await self._deactivate_district(config.district_id)
            config.is_active = changes["is_active"]

        await self.session.flush()
        return config

    async def delete(self, config_id: int) -> None:
        config = await self.get(config_id)
        await self.session.delete(config)
        await self.session.flush()

    async def compute_schedule(self, config_id: int, year: int) -> list[PeriodDescriptor]:
        """Periods whose pay date falls in ``year``, sorted by pay date.

        Raises:
            ConfigurationNotFoundError: If the configuration does not exist
        """
        config = await self.get(config_id)
        return PayScheduleCalculator.schedule_for_year(config.pay_dates, year)

    @staticmethod
    def period_bounds(config: PayCalendarConfig, month: int, year: int) -> PeriodBounds:
        return PayScheduleCalculator.period_bounds(config.pay_dates, month, year)

    async def _deactivate_district(self, district_id: int) -> None:
        await self.session.execute(
            update(PayCalendarConfig)
            .where(
                PayCalendarConfig.district_id == district_id,
                PayCalendarConfig.is_active.is_(True),
            )
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )

    @staticmethod
    def _normalize(pay_dates: list[dict[str, Any]]) -> list[dict[str, Any]]:
        try:
            entries = PayScheduleCalculator.parse_entries(pay_dates)
        except ValueError as e:
            raise PayCalendarValidationError([str(e)]) from e

        errors = PayScheduleCalculator.validate_entries(entries)
        if errors:
            raise PayCalendarValidationError(errors)
        return [entry.to_dict() for entry in entries]
