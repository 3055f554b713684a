"""Generation template registry."""

from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timecard_engine.models import GenerationTemplate, TimecardTemplate


class TemplateNotFoundError(Exception):
    """Raised when a generation template does not exist."""

    def __init__(self, template_id: int):
        self.template_id = template_id
        super().__init__(f"Generation template {template_id} not found")


class TemplateIndex:
    """Employee-type keyed lookup over a run's templates.

    When several templates share a type the first one (lowest id) wins.
    """

    def __init__(self, templates: Iterable[GenerationTemplate]):
        self._by_type: dict[str, GenerationTemplate] = {}
        for template in templates:
            self._by_type.setdefault(template.employee_type, template)

    def match(self, employee_type: str) -> GenerationTemplate | None:
        return self._by_type.get(employee_type)

    @property
    def employee_types(self) -> list[str]:
        return sorted(self._by_type)

    def __len__(self) -> int:
        return len(self._by_type)


class GenerationTemplateRegistry:
    """Per-employee-type generation templates for a district.

    Templates are authored by HR admins; generation only reads them.
    """

    _UPDATABLE = {
        "name",
        "employee_type",
        "timecard_template_id",
        "default_field_values",
        "auto_generation_enabled",
        "is_active",
    }

    def __init__(self, session: AsyncSession):
        self.session = session

    async def active_templates(
        self,
        district_id: int,
        employee_types: list[str] | None = None,
    ) -> list[GenerationTemplate]:
        """Active, auto-generation-enabled templates ordered by id."""
        query = select(GenerationTemplate).where(
            GenerationTemplate.district_id == district_id,
            GenerationTemplate.is_active.is_(True),
            GenerationTemplate.auto_generation_enabled.is_(True),
        )
        if employee_types:
            query = query.where(GenerationTemplate.employee_type.in_(employee_types))

        result = await self.session.execute(query.order_by(GenerationTemplate.id))
        return list(result.scalars().all())

    async def build_index(
        self,
        district_id: int,
        employee_types: list[str] | None = None,
    ) -> TemplateIndex:
        return TemplateIndex(await self.active_templates(district_id, employee_types))

    async def create(
        self,
        district_id: int,
        name: str,
        employee_type: str,
        timecard_template_id: int,
        default_field_values: dict[str, Any] | None = None,
        auto_generation_enabled: bool = True,
        is_active: bool = True,
    ) -> GenerationTemplate:
        template = GenerationTemplate(
            district_id=district_id,
            name=name,
            employee_type=employee_type,
            timecard_template_id=timecard_template_id,
            default_field_values=dict(default_field_values or {}),
            auto_generation_enabled=auto_generation_enabled,
            is_active=is_active,
        )
        self.session.add(template)
        await self.session.flush()
        return template

    async def create_timecard_template(
        self,
        district_id: int,
        name: str,
        employee_type: str,
        fields: list[dict[str, Any]] | None = None,
    ) -> TimecardTemplate:
        template = TimecardTemplate(
            district_id=district_id,
            name=name,
            employee_type=employee_type,
            fields=list(fields or []),
        )
        self.session.add(template)
        await self.session.flush()
        return template

    async def list_timecard_templates(self, district_id: int) -> list[TimecardTemplate]:
        result = await self.session.execute(
            select(TimecardTemplate)
            .where(TimecardTemplate.district_id == district_id)
            .order_by(TimecardTemplate.id)
        )
        return list(result.scalars().all())

    async def get(self, template_id: int) -> GenerationTemplate:
        template = await self.session.get(GenerationTemplate, template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    async def list_for_district(self, district_id: int) -> list[GenerationTemplate]:
        result = await self.session.execute(
            select(GenerationTemplate)
            .where(GenerationTemplate.district_id == district_id)
            .order_by(GenerationTemplate.created_at.desc(), GenerationTemplate.id.desc())
        )
        return list(result.scalars().all())

    async def update(self, template_id: int, **changes: Any) -> GenerationTemplate:
        template = await self.get(template_id)
        for key, value in changes.items():
            if key not in self._UPDATABLE:
                raise ValueError(f"Cannot update field '{key}'")
            if value is not None:
                setattr(template, key, value)
        await self.session.flush()
        return template

    async def delete(self, template_id: int) -> None:
        template = await self.get(template_id)
        await self.session.delete(template)
        await self.session.flush()
