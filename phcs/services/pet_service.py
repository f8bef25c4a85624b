"""Pet management service helpers."""

from __future__ import annotations

import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from phcs.models.pet import DEFAULT_SPECIES, Pet


async def create_pet(
    session: AsyncSession,
    *,
    owner_id: uuid.UUID,
    name: str,
    species: str | None = None,
    breed: str | None = None,
    health_notes: str | None = None,
) -> Pet:
    """Create a pet for an owner. Pets are never deduplicated."""
    pet = Pet(
        owner_id=owner_id,
        name=name,
        species=species or DEFAULT_SPECIES,
        breed=breed,
        health_notes=health_notes,
    )
    session.add(pet)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(pet)
    return pet
