"""Exercise the SQLAlchemy content-link repository and unit of work."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from contentyield.adapters.sqlalchemy import (
    SqlAlchemyContentLinkRepository,
    StartupError,
    startup,
)
from contentyield.adapters.sqlalchemy.unit_of_work import configured_engine
from contentyield.domain.model import ContentLink

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session

    from contentyield.adapters.sqlalchemy import SqlAlchemyContentLinkUnitOfWork


def test_repository_round_trips_links(sqlite_session: Session) -> None:
    repository = SqlAlchemyContentLinkRepository(sqlite_session)
    link = ContentLink(
        video_id="v1",
        product_ids=["P1", "P2"],
        title="Unboxing Widget",
        display_name="Widget",
        manually_linked=True,
        video_date="2024-03-01",
        video_duration="630",
    )
    repository.add(link)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repository.get_by_video_id("v1")

    assert loaded is not None
    assert loaded is not link
    assert loaded.id == link.id
    assert loaded.product_ids == ["P1", "P2"]
    assert loaded.display_name == "Widget"
    assert loaded.manually_linked
    assert loaded.video_duration == "630"


def test_repository_lists_and_removes(sqlite_session: Session) -> None:
    repository = SqlAlchemyContentLinkRepository(sqlite_session)
    repository.add(ContentLink(video_id="v2"))
    repository.add(ContentLink(video_id="v1", product_ids=["P1"]))
    sqlite_session.commit()

    assert [link.video_id for link in repository.list()] == ["v1", "v2"]

    repository.remove(repository.list()[0])
    sqlite_session.commit()

    assert repository.get_by_video_id("v1") is None
    assert [link.video_id for link in repository.list()] == ["v2"]


def test_product_id_changes_are_persisted(sqlite_session: Session) -> None:
    repository = SqlAlchemyContentLinkRepository(sqlite_session)
    link = ContentLink(video_id="v1", product_ids=["P1"])
    repository.add(link)
    sqlite_session.commit()

    link.add_product_ids(["P2"])
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repository.get_by_video_id("v1")
    assert loaded is not None
    assert loaded.product_ids == ["P1", "P2"]


def test_unit_of_work_commits_and_rolls_back(
    sqlite_unit_of_work: Callable[[], SqlAlchemyContentLinkUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.links.add(ContentLink(video_id="kept"))
        uow.commit()

    with pytest.raises(RuntimeError, match="boom"), sqlite_unit_of_work() as uow:
        uow.repositories.links.add(ContentLink(video_id="dropped"))
        raise RuntimeError("boom")

    with sqlite_unit_of_work() as uow:
        assert [link.video_id for link in uow.repositories.links.list()] == ["kept"]


def test_startup_refuses_to_reinitialise(
    sqlite_engine: Engine,
    sqlite_unit_of_work: Callable[[], SqlAlchemyContentLinkUnitOfWork],
) -> None:
    _ = sqlite_unit_of_work

    assert configured_engine() is sqlite_engine
    with pytest.raises(StartupError):
        startup(database_uri="sqlite+pysqlite:///:memory:")
