"""
Changelog generation from a stream of commits.

:func:`generate_changelog` is the core entry point: an async generator
that reads commit chunks one at a time, splits them into releases and
yields each rendered release as soon as its boundary is found. The
other helpers wrap it:

* :func:`changelog_from_commits` joins all releases into one string,
* :func:`write_changelog` does the same synchronously,
* :class:`ChangelogWriterStream` accepts commits pushed by a producer
  and yields releases to a consumer.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Iterable, Mapping, Optional, Union

from changelog_writer._async import iterate
from changelog_writer.config.options import WriterOptions, resolve_context, resolve_options
from changelog_writer.records.normalizer import normalize_commit
from changelog_writer.rendering.context import render_release
from changelog_writer.rendering.templates import compile_templates
from changelog_writer.segmentation import ReleaseState, advance, finish


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


Commits = Union[Iterable[Any], AsyncIterator[Any]]
Options = Union[WriterOptions, Mapping[str, Any], None]


@dataclass(frozen=True)
class ReleaseEntry:
    """A rendered release together with the key commit that identifies it."""

    text: str
    key_commit: Any


def _describe(key_commit: Any) -> str:
    if isinstance(key_commit, Mapping):
        return str(key_commit.get("version") or key_commit.get("hash") or "commit")
    return "none" if key_commit is None else "chunk"


async def generate_changelog(
    commits: Commits,
    context: Optional[Mapping[str, Any]] = None,
    options: Options = None,
) -> AsyncIterator[Union[str, ReleaseEntry]]:
    """Yield one rendered changelog section per release.

    Options are resolved and templates compiled before the first commit
    is read, so configuration errors surface immediately. Errors raised
    by transforms, hooks or templates propagate and end the generation.
    """
    opts = resolve_options(options)
    base_context = resolve_context(context)
    renderer = compile_templates(opts)

    def is_boundary(key_commit: Any, group: list) -> bool:
        return bool(opts.generate_on(key_commit, group, base_context, opts))

    def entry(text: str, key_commit: Any) -> Union[str, ReleaseEntry]:
        if opts.include_details:
            return ReleaseEntry(text=text, key_commit=key_commit)
        return text

    state = ReleaseState()
    async for chunk in iterate(commits):
        commit = await normalize_commit(chunk, opts.transform, base_context)
        key_commit = commit or chunk
        state, release = advance(
            state, commit, key_commit, is_boundary, reverse=opts.reverse, do_flush=opts.do_flush
        )
        if release is None:
            continue

        text = await render_release(renderer, opts, release.commits, base_context, release.key_commit)
        logger.debug(
            "Closed release %s with %d commit(s)%s",
            _describe(release.key_commit),
            len(release.commits),
            "" if release.emit else " (suppressed)",
        )
        if release.emit:
            yield entry(text, release.key_commit)

    release = finish(state, reverse=opts.reverse, do_flush=opts.do_flush)
    if release is None:
        logger.debug("Discarding %d unreleased commit(s)", len(state.group))
        return

    text = await render_release(renderer, opts, release.commits, base_context, release.key_commit)
    logger.debug("Flushed release %s with %d commit(s)", _describe(release.key_commit), len(release.commits))
    yield entry(text, release.key_commit)


async def changelog_from_commits(
    commits: Commits,
    context: Optional[Mapping[str, Any]] = None,
    options: Options = None,
) -> str:
    """Render all releases and join them into one changelog string."""
    parts = []
    async for item in generate_changelog(commits, context, options):
        parts.append(item.text if isinstance(item, ReleaseEntry) else item)
    return "".join(parts)


def write_changelog(
    commits: Iterable[Any],
    context: Optional[Mapping[str, Any]] = None,
    options: Options = None,
) -> str:
    """Synchronous form of :func:`changelog_from_commits`."""
    return asyncio.run(changelog_from_commits(commits, context, options))


_END = object()


class ChangelogWriterStream:
    """Push commits in, pull rendered releases out.

    Producers ``await write(chunk)`` for each commit and ``await end()``
    when done; consumers iterate with ``async for``. At most
    ``max_pending`` chunks are buffered, so a producer waits until the
    consumer has pulled enough releases for the writer to catch up.

    Once the consumer stops, by finishing, failing or closing the
    iterator early, pending and later writes return ``False`` instead
    of waiting. A stream can be iterated only once.
    """

    def __init__(
        self,
        context: Optional[Mapping[str, Any]] = None,
        options: Options = None,
        max_pending: int = 1,
    ) -> None:
        self._queue: "asyncio.Queue[Any]" = asyncio.Queue(maxsize=max_pending)
        self._closed = asyncio.Event()
        self._context = context
        self._options = options
        self._ended = False
        self._iterated = False

    @property
    def closed(self) -> bool:
        """True once the consumer has stopped reading."""
        return self._closed.is_set()

    async def _put(self, item: Any) -> bool:
        if self._closed.is_set():
            return False
        put = asyncio.ensure_future(self._queue.put(item))
        closed = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait({put, closed}, return_when=asyncio.FIRST_COMPLETED)
            return put.done() and not put.cancelled()
        finally:
            for task in (put, closed):
                if not task.done():
                    task.cancel()

    async def write(self, chunk: Any) -> bool:
        """Queue ``chunk``; returns ``False`` when the consumer has stopped."""
        if self._ended:
            raise RuntimeError("Cannot write to a stream that has ended")
        return await self._put(chunk)

    async def end(self) -> None:
        if not self._ended:
            self._ended = True
            await self._put(_END)

    async def _chunks(self) -> AsyncIterator[Any]:
        while True:
            chunk = await self._queue.get()
            if chunk is _END:
                return
            yield chunk

    async def _releases(self) -> AsyncIterator[Union[str, ReleaseEntry]]:
        try:
            async for item in generate_changelog(self._chunks(), self._context, self._options):
                yield item
        finally:
            self._closed.set()
            logger.debug("Stream consumer stopped")

    def __aiter__(self) -> AsyncIterator[Union[str, ReleaseEntry]]:
        if self._iterated:
            raise RuntimeError("A changelog stream can only be iterated once")
        self._iterated = True
        return self._releases()
