"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from contentyield.adapters.exports import (
    asset_descriptors,
    product_records,
    sponsored_records,
    video_records,
)
from contentyield.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyContentLinkUnitOfWork,
    is_started,
    startup,
)
from contentyield.config import get_matching_config
from contentyield.domain.model import ContentLink
from contentyield.domain.reconciliation import (
    ReconciliationEngine,
    VerificationWorkflow,
    summarize,
)
from contentyield.domain.ports.unit_of_work import ContentLinkUnitOfWork

if TYPE_CHECKING:
    from contentyield.domain.reconciliation import (
        CommitResult,
        EntityRegistry,
        FoldResult,
        MatchCandidate,
        RegistrySummary,
    )

UnitOfWorkFactory = Callable[[], ContentLinkUnitOfWork]
type ExportRows = Iterable[Mapping[str, object]]

log = getLogger(__name__)


@dataclass(slots=True)
class ReconcileReport:
    registry: EntityRegistry
    fold: FoldResult
    candidates: list[MatchCandidate]
    workflow: VerificationWorkflow
    summary: RegistrySummary
    commit: CommitResult | None = None
    links: list[ContentLink] = field(default_factory=list["ContentLink"])


def _ensure_started() -> None:
    if not is_started():
        startup()


def load_links(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> list[ContentLink]:
    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyContentLinkUnitOfWork
    with effective_uow() as uow:
        return uow.repositories.links.list()


def store_links(
    links: Iterable[ContentLink],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> int:
    """Insert new links and refresh stored ones, keyed by video id."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyContentLinkUnitOfWork
    stored = 0
    with effective_uow() as uow:
        repository = uow.repositories.links
        for link in links:
            existing = repository.get_by_video_id(link.video_id)
            if existing is None:
                repository.add(
                    ContentLink(
                        id=link.id,
                        video_id=link.video_id,
                        product_ids=list(link.product_ids),
                        title=link.title,
                        display_name=link.display_name,
                        manually_linked=link.manually_linked,
                        video_date=link.video_date,
                        video_duration=link.video_duration,
                    )
                )
            elif existing is not link:
                existing.add_product_ids(link.product_ids)
                existing.display_name = link.display_name or existing.display_name
                existing.manually_linked = existing.manually_linked or link.manually_linked
                existing.title = existing.title or link.title
                existing.video_date = existing.video_date or link.video_date
                existing.video_duration = existing.video_duration or link.video_duration
            stored += 1
        uow.commit()
    log.info("Stored %s content links", stored)
    return stored


def reconcile_exports(
    *,
    video_rows: ExportRows = (),
    product_rows: ExportRows = (),
    sponsored_rows: ExportRows = (),
    asset_rows: ExportRows = (),
    commit_auto: bool = False,
    engine: ReconciliationEngine | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ReconcileReport:
    """Run one import cycle over already-parsed export rows.

    With ``commit_auto`` the auto-approvable candidates are committed straight away
    and the resulting links persisted; otherwise the staged workflow is handed back
    for the caller to review.
    """

    if engine is None:
        config = get_matching_config()
        engine = ReconciliationEngine(config.to_policy(), config.fold_chunk_size)
    links = load_links(unit_of_work_factory=unit_of_work_factory)
    log.info("Starting reconciliation with %s stored links", len(links))

    registry, fold = engine.build_registry(
        video_records(video_rows),
        product_records(product_rows),
        sponsored_records(sponsored_rows),
        links,
    )
    workflow = VerificationWorkflow()
    candidates = engine.stage(workflow, registry, asset_descriptors(asset_rows))

    commit: CommitResult | None = None
    if commit_auto:
        workflow.begin_review()
        commit = workflow.commit(registry, links)
        links = commit.links
        if commit.applied:
            store_links(links, unit_of_work_factory=unit_of_work_factory)
        for warning in commit.warnings:
            log.warning("Commit warning: %s", warning)

    report = ReconcileReport(
        registry=registry,
        fold=fold,
        candidates=candidates,
        workflow=workflow,
        summary=summarize(registry),
        commit=commit,
        links=links,
    )
    log.info(
        "Finished reconciliation: entities=%s, revenue=%s, candidates=%s, orphans=%s",
        report.summary.entities,
        report.summary.revenue,
        len(candidates),
        len(registry.orphans()),
    )
    return report


def link_manually(
    *,
    video_id: str,
    product_ids: Iterable[str],
    display_name: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ContentLink:
    """Record a reviewer-confirmed association outside the matching workflow."""

    video_id = video_id.strip()
    if not video_id:
        raise ValueError("A manual link needs a video id")
    cleaned = [product_id.strip() for product_id in product_ids if product_id.strip()]
    if not cleaned:
        raise ValueError("A manual link needs at least one product id")

    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyContentLinkUnitOfWork
    with effective_uow() as uow:
        repository = uow.repositories.links
        link = repository.get_by_video_id(video_id)
        if link is None:
            link = ContentLink(video_id=video_id, product_ids=cleaned, manually_linked=True)
            repository.add(link)
        else:
            link.add_product_ids(cleaned)
            link.manually_linked = True
        if display_name is not None:
            link.display_name = display_name.strip() or None
        uow.commit()
    log.info("Linked video %s to products %s", video_id, ", ".join(link.product_ids))
    return link


def unlink(*, video_id: str, unit_of_work_factory: UnitOfWorkFactory | None = None) -> bool:
    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyContentLinkUnitOfWork
    with effective_uow() as uow:
        link = uow.repositories.links.get_by_video_id(video_id)
        if link is None:
            return False
        uow.repositories.links.remove(link)
        uow.commit()
    log.info("Removed link for video %s", video_id)
    return True
