from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from contentyield.app import link_manually, load_links, reconcile_exports, store_links, unlink
from contentyield.domain.model import ContentLink
from contentyield.domain.reconciliation import WorkflowState

if TYPE_CHECKING:
    from collections.abc import Callable

    from contentyield.adapters.sqlalchemy import SqlAlchemyContentLinkUnitOfWork

VIDEO_ROWS = [
    {
        "videoId": "v1",
        "videoTitle": "Unboxing Widget",
        "publishDate": "2024-03-01",
        "duration": "10:30",
        "estimatedRevenue": "10.00",
    },
    {"videoId": "v2", "videoTitle": "Gadget Teardown", "estimatedRevenue": "4.00"},
]
PRODUCT_ROWS = [
    {"asin": "P1", "productTitle": "Widget Pro 3000", "revenue": "5.00"},
    {"asin": "P2", "productTitle": "Gadget Teardown", "revenue": "2.00"},
]
ASSET_ROWS = [
    {"title": "unboxing widget", "duration": "10:31", "uploadDate": "2024-03-02", "asins": ["P1"]}
]


def test_reconcile_stages_candidates_without_committing(
    sqlite_unit_of_work: Callable[[], SqlAlchemyContentLinkUnitOfWork],
) -> None:
    report = reconcile_exports(
        video_rows=VIDEO_ROWS,
        product_rows=PRODUCT_ROWS,
        asset_rows=ASSET_ROWS,
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert report.workflow.state is WorkflowState.STAGED
    assert report.commit is None
    assert len(report.candidates) == 2
    assert report.summary.revenue == Decimal("21.00")
    assert load_links(unit_of_work_factory=sqlite_unit_of_work) == []


def test_reconcile_commit_auto_persists_links(
    sqlite_unit_of_work: Callable[[], SqlAlchemyContentLinkUnitOfWork],
) -> None:
    report = reconcile_exports(
        video_rows=VIDEO_ROWS,
        product_rows=PRODUCT_ROWS,
        asset_rows=ASSET_ROWS,
        commit_auto=True,
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert report.commit is not None
    assert report.commit.applied == 1
    stored = load_links(unit_of_work_factory=sqlite_unit_of_work)
    assert [(link.video_id, link.product_ids) for link in stored] == [("v1", ["P1"])]

    again = reconcile_exports(
        video_rows=VIDEO_ROWS,
        product_rows=PRODUCT_ROWS,
        unit_of_work_factory=sqlite_unit_of_work,
    )
    widget = again.registry.by_video_id("v1")
    assert widget is not None
    assert widget.total == Decimal("15.00")
    assert widget.is_linked


def test_store_links_merges_into_existing_rows(
    sqlite_unit_of_work: Callable[[], SqlAlchemyContentLinkUnitOfWork],
) -> None:
    store_links(
        [ContentLink(video_id="v1", product_ids=["P1"])], unit_of_work_factory=sqlite_unit_of_work
    )
    store_links(
        [ContentLink(video_id="v1", product_ids=["P2"], display_name="Widget")],
        unit_of_work_factory=sqlite_unit_of_work,
    )

    [link] = load_links(unit_of_work_factory=sqlite_unit_of_work)
    assert link.product_ids == ["P1", "P2"]
    assert link.display_name == "Widget"


def test_manual_links_can_be_added_and_removed(
    sqlite_unit_of_work: Callable[[], SqlAlchemyContentLinkUnitOfWork],
) -> None:
    link = link_manually(
        video_id="v9",
        product_ids=["P9", " "],
        display_name="Nine",
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert link.manually_linked
    assert link.product_ids == ["P9"]
    assert unlink(video_id="v9", unit_of_work_factory=sqlite_unit_of_work)
    assert not unlink(video_id="v9", unit_of_work_factory=sqlite_unit_of_work)


def test_manual_link_requires_identifiers(
    sqlite_unit_of_work: Callable[[], SqlAlchemyContentLinkUnitOfWork],
) -> None:
    with pytest.raises(ValueError, match="product id"):
        link_manually(video_id="v1", product_ids=[""], unit_of_work_factory=sqlite_unit_of_work)
    with pytest.raises(ValueError, match="video id"):
        link_manually(video_id=" ", product_ids=["P1"], unit_of_work_factory=sqlite_unit_of_work)
