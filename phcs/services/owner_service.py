"""Owner lookup and creation helpers."""
from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.sql import Select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from phcs.models.owner import Owner
from phcs.security.redact import mask_phone

logger = logging.getLogger(__name__)


def _base_owner_query() -> Select[tuple[Owner]]:
    """Return owners oldest first so reuse is stable across imports."""
    return select(Owner).order_by(Owner.created_at.asc(), Owner.id.asc())


async def get_owner(session: AsyncSession, *, owner_id: uuid.UUID) -> Owner | None:
    """Return a single owner."""
    return await session.get(Owner, owner_id)


async def find_owner_by_phone_or_name(
    session: AsyncSession,
    *,
    phone: str | None,
    name: str | None,
) -> Owner | None:
    """Return an existing owner matching the phone, else the name.

    Phone matches win; a name match is only used when no owner has the
    phone. Ties resolve to the oldest owner.
    """
    if phone:
        result = await session.execute(
            _base_owner_query().where(Owner.phone == phone).limit(1)
        )
        owner = result.scalars().first()
        if owner is not None:
            return owner

    if name:
        result = await session.execute(
            _base_owner_query().where(Owner.name == name).limit(1)
        )
        owner = result.scalars().first()
        if owner is not None:
            logger.info(
                "Reusing owner %s matched by name (phone %s had no match)",
                owner.id,
                mask_phone(phone),
            )
            return owner
    return None


async def create_owner(
    session: AsyncSession,
    *,
    name: str,
    phone: str | None,
    email: str | None,
    address: str | None = None,
) -> Owner:
    """Create an owner contact record."""
    owner = Owner(
        name=name,
        phone=phone,
        email=email.lower() if email else None,
        address=address,
    )
    session.add(owner)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(owner)
    return owner
