"""
Medicine scrape orchestration.

    start engine ──► fetch index ──► build catalog ──► apply cap
                                                          │
        ┌─────────────────────────────────────────────────┘
        ▼
    ConcurrencyScheduler (K at a time)
        │   per medicine: fresh session → DetailExtractor → aggregator
        ▼
    ResultAggregator ──► saver (JSON) ──► shutdown engine

USAGE:
    options = ScrapeOptions(limit=10)
    async with PlaywrightProvider() as provider:
        scraper = MedicineScraper(options, provider, sink=LoggingEventSink())
        result = await scraper.run()
"""

import time
from typing import List, Optional

from .aggregator import ResultAggregator, ResultSaver
from .catalog import LinkCatalogBuilder
from .config import ScrapeOptions
from .detail import DetailExtractor, dismiss_consent
from .documents import DocumentProvider
from .errors import CatalogFetchError, DocumentError
from .events import EventKind, EventSink, ProgressEvent, null_sink
from .models import ItemLink, RunResult
from .scheduler import ConcurrencyScheduler, ProgressSnapshot, ProgressTracker
from .text_repair import TextReconstructionPipeline


class MedicineScraper:
    """
    Runs one full scrape.

    Args:
        options: Run options
        provider: Document provider (started and shut down by run())
        pipeline: Text repair; loaded from options.word_list_path if omitted
        sink: Receives every ProgressEvent
        saver: Persistence collaborator for the finished RunResult
    """

    def __init__(
        self,
        options: ScrapeOptions,
        provider: DocumentProvider,
        pipeline: Optional[TextReconstructionPipeline] = None,
        sink: EventSink = null_sink,
        saver: Optional[ResultSaver] = None,
    ):
        self.options = options
        self.provider = provider
        self.pipeline = pipeline or TextReconstructionPipeline.from_word_list(options.word_list_path)
        self.sink = sink
        self.saver = saver
        self.catalog = LinkCatalogBuilder(base_path=options.base_path)
        self.extractor = DetailExtractor(
            self.pipeline,
            sink=sink,
            timeout_ms=options.timeout_ms,
            section_timeout_ms=options.section_timeout_ms,
        )

    async def run(self) -> RunResult:
        """
        Raises:
            EngineStartError: the provider could not start
            CatalogFetchError: the index page could not be loaded
        """
        started = time.monotonic()
        await self.provider.start()
        try:
            self.sink(ProgressEvent(
                kind=EventKind.RUN_STARTED,
                url=self.options.index_url,
                details={
                    "concurrency": self.options.concurrency,
                    "delay_ms": self.options.delay_ms,
                },
            ))

            links = await self.discover()
            cap = self.options.processing_cap
            to_process = links[:cap] if cap else links

            self.sink(ProgressEvent(
                kind=EventKind.CATALOG_BUILT,
                url=self.options.index_url,
                total=len(links),
                details={"cap": cap, "processing": len(to_process)},
            ))

            result = await self.scrape(links, to_process)

            self.sink(ProgressEvent(
                kind=EventKind.RUN_COMPLETED,
                processed=result.attempted,
                total=len(to_process),
                percent=100.0,
                details={
                    "succeeded": result.succeeded,
                    "failed": len(result.failed_names),
                    "elapsed": time.monotonic() - started,
                },
            ))
            return result
        finally:
            await self.provider.shutdown()

    async def discover(self) -> List[ItemLink]:
        """Load the index page and build the catalog."""
        url = self.options.index_url
        try:
            async with self.provider.session() as session:
                document = await session.navigate(url, self.options.timeout_ms)
                await dismiss_consent(document)
                links = self.catalog.build(document)
        except DocumentError as e:
            raise CatalogFetchError(f"index page unreachable: {e}", url=url) from e

        return links

    async def scrape(self, links: List[ItemLink], to_process: List[ItemLink]) -> RunResult:
        """Extract every link in to_process under the scheduler."""
        aggregator = ResultAggregator(total_found=len(links), saver=self.saver)
        tracker = ProgressTracker(len(to_process))
        scheduler = ConcurrencyScheduler(self.options.concurrency)

        async def handle(link: ItemLink):
            self.sink(ProgressEvent(kind=EventKind.ITEM_STARTED, name=link.label, url=link.canonical_url))
            try:
                async with self.provider.session() as session:
                    item = await self.extractor.extract(link, session)
            except Exception as e:
                aggregator.add_failure(link.label)
                self._emit_progress(EventKind.ITEM_FAILED, link, tracker.record(), error=str(e))
                return

            await aggregator.add_item(item)
            self._emit_progress(EventKind.ITEM_SUCCEEDED, link, tracker.record(), name=item.name)

        async def guarded(link: ItemLink):
            try:
                await handle(link)
            except Exception as e:
                self.sink(ProgressEvent(
                    kind=EventKind.TASK_ERROR,
                    name=link.label,
                    url=link.canonical_url,
                    error=repr(e),
                ))

        await scheduler.run_all(to_process, guarded, self.options.delay_seconds)

        return aggregator.finish()

    def _emit_progress(
        self,
        kind: EventKind,
        link: ItemLink,
        snapshot: ProgressSnapshot,
        name: Optional[str] = None,
        error: Optional[str] = None,
    ):
        self.sink(ProgressEvent(
            kind=kind,
            name=name or link.label,
            url=link.canonical_url,
            processed=snapshot.processed,
            total=snapshot.total,
            percent=snapshot.percent,
            eta_seconds=snapshot.eta_seconds,
            error=error,
        ))
