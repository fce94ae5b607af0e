"""Run orchestration: clean, generate, then replace the remote index."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from enum import Enum
from typing import Any, Callable, List, Sequence, Set, Tuple

from blogindex.config.models import SearchSettings
from blogindex.content import ContentItem
from blogindex.indexing import (
    DocumentError,
    FieldDefinition,
    IndexDocument,
    IndexLifecycleManager,
    LifecycleError,
    build_schema,
    transform,
)
from blogindex.site import SiteBuilder

LOGGER = logging.getLogger(__name__)


class PipelineState(str, Enum):
    """States visited by a sync run."""

    IDLE = "idle"
    CLEANING = "cleaning"
    GENERATING = "generating"
    SYNCHRONIZING = "synchronizing"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class RunState:
    """Documents collected while the builder generates the site.

    Attributes:
        documents: Documents in collection order.
        rejected: ``(slug, reason)`` pairs for items that produced no document.
        skipped_unpublished: Number of unpublished items ignored.
        frozen: Whether generation has finished and the collection is sealed.
    """

    documents: List[IndexDocument] = field(default_factory=list)
    rejected: List[Tuple[str, str]] = field(default_factory=list)
    skipped_unpublished: int = 0
    frozen: bool = False
    _keys: Set[str] = field(default_factory=set)

    def add(self, document: IndexDocument) -> bool:
        """Append ``document`` unless its key was already collected.

        Raises:
            RuntimeError: If the collection has been frozen.
        """
        if self.frozen:
            raise RuntimeError("Cannot add documents after generation completed.")
        key = document["postId"]
        if key in self._keys:
            self.rejected.append((key, "duplicate postId"))
            return False
        self._keys.add(key)
        self.documents.append(document)
        return True

    def freeze(self) -> Tuple[IndexDocument, ...]:
        """Seal the collection and return its documents."""
        self.frozen = True
        return tuple(self.documents)


@dataclass(slots=True)
class SyncResult:
    """Outcome of a sync run.

    Attributes:
        state: Final pipeline state.
        transitions: States visited, in order.
        collected: Number of documents built during generation.
        rejected: ``(slug, reason)`` pairs for rejected items.
        skipped_unpublished: Number of unpublished items ignored.
        index_deleted: Whether the service confirmed deleting the old index.
        uploaded: Number of documents acknowledged by the service.
        chunks: Number of upload requests issued.
        duration_seconds: Wall-clock duration of the run.
    """

    state: PipelineState = PipelineState.IDLE
    transitions: List[PipelineState] = field(default_factory=lambda: [PipelineState.IDLE])
    collected: int = 0
    rejected: List[Tuple[str, str]] = field(default_factory=list)
    skipped_unpublished: int = 0
    index_deleted: bool = False
    uploaded: int = 0
    chunks: int = 0
    duration_seconds: float = 0.0

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of the result."""
        return {
            "state": self.state.value,
            "transitions": [state.value for state in self.transitions],
            "counts": {
                "collected": self.collected,
                "uploaded": self.uploaded,
                "chunks": self.chunks,
                "rejected": len(self.rejected),
                "skipped": self.skipped_unpublished,
            },
            "rejected": [{"slug": slug, "reason": reason} for slug, reason in self.rejected],
            "index_deleted": self.index_deleted,
            "duration_seconds": round(self.duration_seconds, 3),
        }


Phase = Callable[[RunState], None]


class SyncPipeline:
    """Drive one run: clean, generate while collecting documents, synchronize.

    An instance runs once; create a new pipeline per run.
    """

    def __init__(
        self,
        builder: SiteBuilder,
        manager: IndexLifecycleManager,
        settings: SearchSettings,
        *,
        default_tz: tzinfo = timezone.utc,
    ) -> None:
        self.builder = builder
        self.manager = manager
        self.settings = settings
        self.default_tz = default_tz
        self.result = SyncResult()
        self.fields: Sequence[FieldDefinition] = ()
        self._documents: Tuple[IndexDocument, ...] = ()

    @property
    def state(self) -> PipelineState:
        return self.result.state

    @property
    def documents(self) -> Tuple[IndexDocument, ...]:
        """Documents handed to the synchronize phase."""
        return self._documents

    def run(self) -> SyncResult:
        """Execute every phase in order and return the result.

        Raises:
            LifecycleError: If the builder's clean or generate step fails.
            IndexDeleteError: If the old index could not be deleted safely.
            SchemaApplyError: If the index could not be created.
            UploadError: If a document chunk could not be uploaded.
            RuntimeError: If this pipeline already ran.
        """
        if self.state is not PipelineState.IDLE:
            raise RuntimeError("SyncPipeline instances can only run once.")

        started = time.monotonic()
        self.fields = tuple(build_schema(self.settings))
        run_state = RunState()
        phases: List[Tuple[PipelineState, Phase]] = [
            (PipelineState.CLEANING, self._clean),
            (PipelineState.GENERATING, self._generate),
            (PipelineState.SYNCHRONIZING, self._synchronize),
        ]
        try:
            for state, phase in phases:
                self._enter(state)
                phase(run_state)
        except Exception as exc:
            failed_during = self.state
            self._enter(PipelineState.FAILED)
            LOGGER.error("Sync failed while %s: %s", failed_during.value, exc)
            raise
        finally:
            self.result.duration_seconds = time.monotonic() - started

        self._enter(PipelineState.DONE)
        LOGGER.info(
            "Sync complete: %d document(s) uploaded in %d chunk(s).",
            self.result.uploaded,
            self.result.chunks,
        )
        return self.result

    # Phases ------------------------------------------------------------

    def _clean(self, run_state: RunState) -> None:
        LOGGER.info("Clearing generated output ...")
        try:
            self.builder.clean()
        except Exception as exc:
            raise LifecycleError("clean", f"Failed to clean site: {exc}") from exc

    def _generate(self, run_state: RunState) -> None:
        LOGGER.info("Generating site ...")
        hook = self._collector(run_state)
        self.builder.register_post_hook(hook)
        try:
            self.builder.generate()
        except Exception as exc:
            raise LifecycleError("generate", f"Failed to generate site: {exc}") from exc
        finally:
            self.builder.unregister_post_hook(hook)

        self._documents = run_state.freeze()
        self.result.collected = len(self._documents)
        self.result.rejected = list(run_state.rejected)
        self.result.skipped_unpublished = run_state.skipped_unpublished
        LOGGER.info("%d post(s) collected.", len(self._documents))

    def _synchronize(self, run_state: RunState) -> None:
        self.result.index_deleted = self.manager.delete_index()
        self.manager.create_index(self.fields)
        report = self.manager.index_documents(self._documents)
        self.result.uploaded = report.uploaded
        self.result.chunks = report.chunks

    # Helpers -------------------------------------------------------------

    def _collector(self, run_state: RunState) -> Callable[[ContentItem], ContentItem]:
        def collect(item: ContentItem) -> ContentItem:
            if not item.published:
                run_state.skipped_unpublished += 1
                return item
            try:
                document = transform(item, self.settings, default_tz=self.default_tz)
            except DocumentError as exc:
                LOGGER.warning("Skipping post: %s", exc)
                run_state.rejected.append((item.slug or "", str(exc)))
                return item
            if not run_state.add(document):
                LOGGER.warning("Skipping duplicate post %s.", document["postId"])
            return item

        return collect

    def _enter(self, state: PipelineState) -> None:
        LOGGER.debug("Pipeline %s -> %s", self.result.state.value, state.value)
        self.result.state = state
        self.result.transitions.append(state)


__all__ = ["PipelineState", "RunState", "SyncResult", "SyncPipeline"]
