"""Integration tests for the asset CRUD modules (in-memory SQLite)."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from chicpic.database.crud_garments import (
    add_garment,
    delete_garment,
    get_garment,
    get_garments,
    get_garments_by_ids,
    update_garment,
)
from chicpic.database.crud_looks import add_look, delete_look, get_look, get_looks, update_look
from chicpic.database.crud_models import add_model, delete_model, get_model, get_models, update_model
from chicpic.utils.exceptions import AssetNotFoundError, DatabaseError, ValidationError


async def _garment(db: AsyncSession, name: str = "Camiseta", category: str = "camiseta", **kwargs):
    kwargs.setdefault("available_sizes", ["S", "M", "L"])
    return await add_garment(db, name=name, category=category, image_url=f"http://test/{name}.png", **kwargs)


async def _model(db: AsyncSession, name: str = "Lucía", **kwargs):
    kwargs.setdefault("upper_body_size", "M")
    kwargs.setdefault("lower_body_size", "S")
    kwargs.setdefault("shoe_size", "38")
    return await add_model(db, name=name, gender="femenino", image_url=f"http://test/{name}.png", **kwargs)


@pytest.mark.integration
@pytest.mark.asyncio
class TestGarmentCrud:
    """Garment CRUD."""

    async def test_create_and_get(self, db_session: AsyncSession) -> None:
        garment = await _garment(db_session, color="rojo", storage_path="garments/a.png")
        await db_session.commit()

        fetched = await get_garment(db_session, garment.id)

        assert fetched.name == "Camiseta"
        assert fetched.color == "rojo"
        assert fetched.available_sizes == ["S", "M", "L"]
        assert fetched.created_at is not None

    async def test_list_newest_first_and_filter(self, db_session: AsyncSession) -> None:
        old = await _garment(db_session, name="Vieja")
        new = await _garment(db_session, name="Nueva")
        skirt = await _garment(db_session, name="Falda", category="falda")
        now = datetime.now(timezone.utc)
        old.created_at = now - timedelta(days=2)
        new.created_at = now - timedelta(days=1)
        skirt.created_at = now
        await db_session.flush()

        assert [g.name for g in await get_garments(db_session)] == ["Falda", "Nueva", "Vieja"]
        assert [g.name for g in await get_garments(db_session, category="camiseta")] == ["Nueva", "Vieja"]

    async def test_get_by_ids_keeps_order(self, db_session: AsyncSession) -> None:
        first = await _garment(db_session, name="A")
        second = await _garment(db_session, name="B")

        garments = await get_garments_by_ids(db_session, [second.id, uuid4(), first.id])

        assert [g.name for g in garments] == ["B", "A"]

    async def test_update(self, db_session: AsyncSession) -> None:
        garment = await _garment(db_session)

        updated = await update_garment(db_session, garment.id, name="Camiseta rayas", color=None)

        assert updated.name == "Camiseta rayas"
        assert updated.color is None

    async def test_update_unknown_field(self, db_session: AsyncSession) -> None:
        garment = await _garment(db_session)
        with pytest.raises(ValueError):
            await update_garment(db_session, garment.id, id=uuid4())

    async def test_update_missing(self, db_session: AsyncSession) -> None:
        with pytest.raises(AssetNotFoundError):
            await update_garment(db_session, uuid4(), name="x")

    async def test_delete_removes_stored_image(self, db_session: AsyncSession) -> None:
        garment = await _garment(db_session, storage_path="garments/a.png")
        storage = AsyncMock()

        await delete_garment(db_session, garment.id, storage)

        storage.delete_image.assert_awaited_once_with("garments/a.png")
        assert await get_garment(db_session, garment.id) is None

    async def test_delete_missing(self, db_session: AsyncSession) -> None:
        with pytest.raises(AssetNotFoundError):
            await delete_garment(db_session, uuid4())

    async def test_flush_error_wrapped(self) -> None:
        db = MagicMock()
        db.flush = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("constraint failed")))

        with pytest.raises(DatabaseError, match="Garment could not be saved"):
            await add_garment(db, name="Camiseta", category="camiseta", image_url="http://test/a.png")


@pytest.mark.integration
@pytest.mark.asyncio
class TestModelCrud:
    """Fashion model CRUD."""

    async def test_create_with_attributes(self, db_session: AsyncSession) -> None:
        model = await _model(db_session, age="8 años", hair_color="Rubio")

        fetched = await get_model(db_session, model.id)

        assert fetched.age == "8 años"
        assert fetched.hair_color == "Rubio"
        assert fetched.characteristics == ""
        assert [m.id for m in await get_models(db_session)] == [model.id]

    async def test_unknown_attribute(self, db_session: AsyncSession) -> None:
        with pytest.raises(ValueError):
            await _model(db_session, favourite_color="azul")

    async def test_update(self, db_session: AsyncSession) -> None:
        model = await _model(db_session)
        updated = await update_model(db_session, model.id, shoe_size="39", gender="unisex")
        assert (updated.shoe_size, updated.gender) == ("39", "unisex")

    async def test_delete_cascades_to_looks(self, db_session: AsyncSession) -> None:
        model = await _model(db_session, storage_path="models/m.png")
        garment = await _garment(db_session)
        look = await add_look(
            db_session,
            name="Look",
            model_id=model.id,
            garment_ids=[garment.id],
            image_url="http://test/look.png",
            storage_path="looks/l.png",
        )
        await db_session.commit()
        storage = AsyncMock()

        await delete_model(db_session, model.id, storage)
        await db_session.commit()

        assert await get_model(db_session, model.id) is None
        assert await get_look(db_session, look.id) is None
        deleted_paths = {call.args[0] for call in storage.delete_image.await_args_list}
        assert deleted_paths == {"models/m.png", "looks/l.png"}


@pytest.mark.integration
@pytest.mark.asyncio
class TestLookCrud:
    """Styled look CRUD."""

    async def test_create_computes_fits(self, db_session: AsyncSession) -> None:
        model = await _model(db_session)
        shirt = await _garment(db_session, name="Camiseta", category="camiseta", available_sizes=["S", "M"])
        shoes = await _garment(db_session, name="Zapatillas", category="zapatos", available_sizes=["37", "38"])

        look = await add_look(
            db_session,
            name="Look de verano",
            model_id=model.id,
            garment_ids=[shirt.id, shoes.id],
            image_url="http://test/look.png",
            selected_sizes={str(shoes.id): "37"},
        )

        assert look.garment_ids == [str(shirt.id), str(shoes.id)]
        assert [(fit["selected_size"], fit["fit_type"]) for fit in look.garment_fits] == [
            ("M", "perfecto"),
            ("37", "ajustado"),
        ]
        assert [item.id for item in await get_looks(db_session, model_id=model.id)] == [look.id]
        assert await get_looks(db_session, model_id=uuid4()) == []

    async def test_unknown_model(self, db_session: AsyncSession) -> None:
        garment = await _garment(db_session)
        with pytest.raises(AssetNotFoundError, match="Model"):
            await add_look(db_session, name="x", model_id=uuid4(), garment_ids=[garment.id], image_url="u")

    async def test_unknown_garment(self, db_session: AsyncSession) -> None:
        model = await _model(db_session)
        missing = uuid4()
        with pytest.raises(AssetNotFoundError, match=str(missing)):
            await add_look(db_session, name="x", model_id=model.id, garment_ids=[missing], image_url="u")

    async def test_invalid_selected_size(self, db_session: AsyncSession) -> None:
        model = await _model(db_session)
        garment = await _garment(db_session)
        with pytest.raises(ValidationError):
            await add_look(
                db_session,
                name="x",
                model_id=model.id,
                garment_ids=[garment.id],
                image_url="u",
                selected_sizes={str(garment.id): "XXXL"},
            )

    async def test_update_and_delete(self, db_session: AsyncSession) -> None:
        model = await _model(db_session)
        garment = await _garment(db_session)
        look = await add_look(db_session, name="x", model_id=model.id, garment_ids=[garment.id], image_url="u")

        updated = await update_look(db_session, look.id, description="Nuevo look")
        assert updated.description == "Nuevo look"

        with pytest.raises(ValueError):
            await update_look(db_session, look.id, garment_fits=[])

        await delete_look(db_session, look.id)
        assert await get_look(db_session, look.id) is None
