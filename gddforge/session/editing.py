"""SectionEditingSession: in-memory state for one section plus autosave.

State machine:
    loading -> idle(has_unsaved_changes) -> saving -> idle(...)

Edits update the section content and the cross-section snapshot together,
so the AI context sees an edit before it is saved. A failed save keeps the
edits and leaves has_unsaved_changes set.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from datetime import datetime
from enum import Enum

from gddforge.catalog import SectionDefinition, require_section
from gddforge.config.models import SessionConfig
from gddforge.drafter.context import (
    paragraph_to_html,
    paragraphs_to_html,
    section_plain_text,
    split_paragraphs,
)
from gddforge.drafter.enhancement import EnhancementService
from gddforge.drafter.generation import GenerationService
from gddforge.drafter.models import (
    AllSectionsContent,
    EnhanceAction,
    EnhancementRequest,
    GameContext,
    GenerationRequest,
    SectionContent,
)
from gddforge.errors import GDDForgeError, NotFoundError, ValidationError
from gddforge.preferences import PreferencesService
from gddforge.store.base import SectionContentStore

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]
ChunkCallback = Callable[[str], None]


class SessionState(str, Enum):
    loading = "loading"
    idle = "idle"
    saving = "saving"


class SectionEditingSession:
    """Mediates between the content store, the AI services and autosave.

    Runs on one event loop. Store calls go through a worker thread; those and
    the provider streams are the only suspension points.
    """

    def __init__(
        self,
        *,
        store: SectionContentStore,
        game_id: str,
        section_slug: str,
        user_id: str,
        game_context: GameContext,
        generation: GenerationService | None = None,
        enhancement: EnhancementService | None = None,
        preferences: PreferencesService | None = None,
        config: SessionConfig | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.store = store
        self.game_id = game_id
        self.user_id = user_id
        self.game_context = game_context
        self.generation = generation
        self.enhancement = enhancement
        self.preferences = preferences
        self.config = config or SessionConfig()
        self._sleep = sleep

        self.section: SectionDefinition = require_section(section_slug)
        self.state = SessionState.loading
        self.has_unsaved_changes = False
        self.content: SectionContent = {}
        self.all_content: AllSectionsContent = {}
        self.version = 0
        self.model_id: str | None = None
        self.last_saved: datetime | None = None
        self.last_error: GDDForgeError | None = None
        self.last_stream_cancelled = False

        self._edit_seq = 0
        self._save_lock = asyncio.Lock()
        self._autosave_task: asyncio.Task | None = None
        self._stream_task: asyncio.Task | None = None
        self._closed = False

    @property
    def section_slug(self) -> str:
        return self.section.slug

    # -- loading ---------------------------------------------------------------

    async def load(self) -> None:
        """Fetch all section content, this section's version and the preferred model."""
        self._cancel_autosave()
        self.state = SessionState.loading
        slug = self.section.slug

        lookups = [
            asyncio.to_thread(self.store.get_all, self.game_id),
            asyncio.to_thread(self.store.get_record, self.game_id, slug),
        ]
        if self.preferences is not None:
            lookups.append(asyncio.to_thread(self.preferences.get_preferred_model, self.user_id))

        try:
            results = await asyncio.gather(*lookups)
        except GDDForgeError as e:
            self.last_error = e
            logger.error("load failed: game=%s section=%s: %s", self.game_id, slug, e)
            raise

        all_content, record = results[0], results[1]
        self.all_content = copy.deepcopy(all_content)
        self.content = dict(record.content) if record else {}
        if self.content:
            self.all_content[slug] = dict(self.content)
        self.version = record.version if record else 0
        self.last_saved = record.updated_at if record else None
        if len(results) > 2:
            self.model_id = results[2]

        self.has_unsaved_changes = False
        self.last_error = None
        self.state = SessionState.idle
        logger.debug(
            "loaded game=%s section=%s version=%d sections=%d",
            self.game_id, slug, self.version, len(self.all_content),
        )

    async def switch_section(self, section_slug: str) -> None:
        """Drop timers and streams for the current section and load another."""
        section = require_section(section_slug)
        await self._stop_background()
        self.section = section
        self.content = {}
        self.version = 0
        await self.load()

    async def reload(self) -> None:
        """Re-read from the store, discarding local edits (used after a conflict)."""
        await self._stop_background()
        await self.load()

    # -- edits -----------------------------------------------------------------

    def _require_ready(self) -> None:
        if self._closed:
            raise ValidationError("Editing session is closed")
        if self.state is SessionState.loading:
            raise ValidationError("Section is still loading")

    def _apply_content(self, content: SectionContent) -> None:
        self.content = content
        self.all_content[self.section.slug] = dict(content)
        self.has_unsaved_changes = True
        self._edit_seq += 1
        self._schedule_autosave()

    def edit(self, subsection_id: str, value: str) -> None:
        """Set one field. Visible to the AI context immediately."""
        self._require_ready()
        if self.section.get_subsection(subsection_id) is None:
            raise NotFoundError(
                f"Unknown subsection {subsection_id!r} in section {self.section.slug!r}"
            )
        self._apply_content({**self.content, subsection_id: value})

    async def accept_generated(self, subsection_id: str, text: str) -> str:
        """Accept AI text into a field as a normal edit; optionally save right away."""
        html_value = paragraphs_to_html(text)
        self.edit(subsection_id, html_value)
        if self.config.save_on_accept:
            await self.save()
        return html_value

    def combined_text(self) -> str:
        """The section as plain text, one paragraph per filled subsection."""
        return section_plain_text(self.section.slug, self.content)

    def apply_bulk_rewrite(self, text: str) -> None:
        """Spread rewritten paragraphs over the subsections in declared order.

        Paragraph n goes to subsection n, counting empty subsections too.
        The rewrite input leaves empty subsections out, so when they sit
        between filled ones the rewritten text shifts toward earlier fields.
        Subsections past the last paragraph keep their content. Paragraphs
        beyond the last subsection are appended to it.
        """
        self._require_ready()
        paragraphs = split_paragraphs(text)
        if not paragraphs:
            return

        subsections = self.section.subsections
        updated = dict(self.content)
        for index, sub in enumerate(subsections):
            if index >= len(paragraphs):
                break
            if index == len(subsections) - 1:
                updated[sub.id] = "".join(paragraph_to_html(p) for p in paragraphs[index:])
            else:
                updated[sub.id] = paragraph_to_html(paragraphs[index])
        self._apply_content(updated)

    # -- saving ----------------------------------------------------------------

    async def save(self) -> bool:
        """Flush the newest in-memory content. Returns False on failure."""
        self._require_ready()
        async with self._save_lock:
            self._cancel_autosave()
            snapshot = dict(self.content)
            seq = self._edit_seq
            expected = self.version if self.config.check_conflicts else None
            self.state = SessionState.saving
            try:
                result = await asyncio.to_thread(
                    self.store.save,
                    self.game_id,
                    self.section.slug,
                    snapshot,
                    self.user_id,
                    expected,
                )
            except GDDForgeError as e:
                self.last_error = e
                self.state = SessionState.idle
                logger.warning(
                    "save failed: game=%s section=%s: %s", self.game_id, self.section.slug, e
                )
                return False

            self.version = result.version
            self.last_saved = result.updated_at
            self.last_error = None
            # Edits made while the save was in flight are still pending.
            self.has_unsaved_changes = self._edit_seq != seq
            self.state = SessionState.idle
            if self.has_unsaved_changes:
                self._schedule_autosave()
            return True

    def _schedule_autosave(self) -> None:
        """Restart the idle timer. While a save is in flight, save() reschedules."""
        if self._closed or self.state is not SessionState.idle:
            return
        self._cancel_autosave()
        self._autosave_task = asyncio.get_running_loop().create_task(self._autosave_after())

    def _cancel_autosave(self) -> None:
        task = self._autosave_task
        self._autosave_task = None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

    async def _autosave_after(self) -> None:
        await self._sleep(self.config.autosave_seconds)
        self._autosave_task = None
        if self.has_unsaved_changes and self.state is SessionState.idle and not self._closed:
            logger.debug("autosave: game=%s section=%s", self.game_id, self.section.slug)
            await self.save()

    # -- AI --------------------------------------------------------------------

    async def generate(
        self,
        subsection_id: str,
        model_id: str | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> str:
        """Stream a draft for one field. The draft is not applied until accepted."""
        self._require_ready()
        if self.generation is None:
            raise ValidationError("Generation is not configured for this session")
        request = GenerationRequest(
            section_type=self.section.slug,
            sub_section_type=subsection_id,
            game_context=self.game_context,
            all_content=copy.deepcopy(self.all_content),
            model_id=model_id or self.model_id,
        )
        try:
            return await self._consume(self.generation.generate(request), on_chunk)
        except GDDForgeError as e:
            self.last_error = e
            raise

    async def enhance(
        self,
        action: EnhanceAction,
        model_id: str | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> str:
        """Rewrite the whole section and spread the result back over its fields."""
        self._require_ready()
        if self.enhancement is None:
            raise ValidationError("Enhancement is not configured for this session")
        request = EnhancementRequest(
            action=action,
            text=self.combined_text(),
            section_type=self.section.slug,
            game_context=self.game_context,
            model_id=model_id or self.model_id,
        )
        try:
            result = await self._consume(self.enhancement.enhance(request), on_chunk)
        except GDDForgeError as e:
            self.last_error = e
            raise
        if result and not self.last_stream_cancelled:
            self.apply_bulk_rewrite(result)
        return result

    async def _consume(self, stream: AsyncIterator[str], on_chunk: ChunkCallback | None) -> str:
        parts: list[str] = []
        self.last_stream_cancelled = False

        async def pump() -> None:
            async with aclosing(stream) as chunks:
                async for chunk in chunks:
                    parts.append(chunk)
                    if on_chunk is not None:
                        on_chunk("".join(parts).strip())

        task = asyncio.get_running_loop().create_task(pump())
        self._stream_task = task
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if not task.cancelled() or (current is not None and current.cancelling()):
                raise
            self.last_stream_cancelled = True
            logger.debug("stream cancelled: section=%s", self.section.slug)
        finally:
            if self._stream_task is task:
                self._stream_task = None
        return "".join(parts).strip()

    def cancel_stream(self) -> None:
        """Stop consuming the in-flight stream. The provider request is not guaranteed to stop."""
        if self._stream_task is not None and not self._stream_task.done():
            self._stream_task.cancel()

    # -- teardown --------------------------------------------------------------

    async def _stop_background(self) -> None:
        tasks = [t for t in (self._autosave_task, self._stream_task) if t is not None]
        self._cancel_autosave()
        self.cancel_stream()
        for task in tasks:
            if task is asyncio.current_task():
                continue
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def close(self) -> None:
        """Cancel the autosave timer and any in-flight stream. Unsaved edits are not flushed."""
        await self._stop_background()
        self._closed = True
        if self.has_unsaved_changes:
            logger.info(
                "closing section=%s with unsaved changes", self.section.slug
            )
