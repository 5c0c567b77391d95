"""Pipeline orchestrator — one full regeneration of tools metadata.

Sequence: discover tools, fetch and hash each (or skip hashing), assemble
records, serialize the index/products pair, publish both. The first failure
ends the run in FAILED and is re-raised unchanged; nothing is retried.

Both documents are serialized before anything is written. The products
document is written first, so a failure between the two writes leaves an
unreferenced products file rather than an index pointing at nothing.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from datetime import datetime, timezone

import requests
from rich.console import Console

from toolstream.core.assembler import MetadataAssembler
from toolstream.core.discovery import ArtifactDiscovery
from toolstream.core.hasher import ContentHasher
from toolstream.core.simplestreams import PATH_PREFIX
from toolstream.core.stage_machine import PipelineStateMachine
from toolstream.environs import Environ
from toolstream.models.config import GenerateConfig, GenerateResult, RunInfo
from toolstream.models.stages import PipelineState
from toolstream.storage import open_sink
from toolstream.storage.base import StorageSink

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Orchestrator:
    """Runs the metadata generation pipeline against one environment.

    Parameters
    ----------
    environ:
        Environment whose storages hold the tools.
    config:
        Per-run parameters.
    sink:
        Publish target. When omitted, ``open_sink`` selects one from
        *config* and tears it down at the end of the run.
    hasher:
        Content hasher used when fetching is enabled.
    session:
        HTTP session shared by the hasher and any HTTP storage.
    timeout:
        Per-request HTTP timeout in seconds.
    console:
        Where progress lines are printed.
    clock:
        Source of the ``updated`` timestamp written into the documents.
    """

    def __init__(
        self,
        environ: Environ,
        config: GenerateConfig,
        *,
        sink: StorageSink | None = None,
        hasher: ContentHasher | None = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
        console: Console | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.environ = environ
        self.config = config
        self._sink = sink
        self._session = session or requests.Session()
        self._timeout = timeout
        self._hasher = hasher or ContentHasher(self._session, timeout=timeout)
        self._console = console or Console()
        self._clock = clock or _utcnow

        self.stage_machine = PipelineStateMachine()
        self.run_info = RunInfo(config=config)
        self.assembler = MetadataAssembler(self._hasher, fetch=config.fetch)

    @property
    def run_id(self) -> str:
        return self.run_info.run_id

    @property
    def state(self) -> PipelineState:
        return self.stage_machine.state

    def _progress(self, message: str) -> None:
        self._console.print(message, markup=False, highlight=False, soft_wrap=True)
        logger.info(message)

    def _open_sink(self):
        if self._sink is not None:
            return contextlib.nullcontext(self._sink)
        return open_sink(
            self.config, self.environ, self._session, timeout=self._timeout
        )

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> GenerateResult:
        """Execute the pipeline once.

        Raises
        ------
        ToolsMetadataError
            The first failure, after the run has entered FAILED.
        """
        if self.stage_machine.state != PipelineState.INIT:
            raise RuntimeError(f"run {self.run_id} has already been started")
        try:
            with self._open_sink() as sink:
                return self._run(sink)
        except Exception as exc:
            self.stage_machine.fail(exc)
            logger.error("Run %s failed: %s", self.run_id, exc)
            raise

    def _run(self, sink: StorageSink) -> GenerateResult:
        machine = self.stage_machine

        machine.transition(PipelineState.DISCOVERING)
        self._progress("Finding tools...")
        storages = [s for s in (sink.storage, self.environ.public_storage) if s is not None]
        candidates = ArtifactDiscovery(storages).find_tools(
            self.config.major_version, self.config.tools_filter
        )
        logger.info("Run %s: %d tools found", self.run_id, len(candidates))

        for candidate in candidates:
            if self.assembler.fetch:
                machine.transition(PipelineState.HASHING, candidate.url)
                self._progress(f"Fetching tools to generate hash: {candidate.url}")
            else:
                machine.transition(PipelineState.SKIPPING_HASH, candidate.url)
            digest = self.assembler.digest_for(candidate)
            machine.transition(PipelineState.ASSEMBLING, candidate.url)
            self.assembler.append(candidate, digest)

        machine.transition(PipelineState.SERIALIZING)
        pair = self.assembler.serialize(self._clock())

        machine.transition(PipelineState.PUBLISHING)
        written: list[str] = []
        for obj in pair.objects(PATH_PREFIX):
            address = sink.resolve_address(obj.path)
            self._progress(f"Writing {address}")
            sink.put(obj.path, obj.data)
            written.append(address)

        machine.transition(PipelineState.DONE)
        return GenerateResult(
            run_id=self.run_id,
            state=machine.state,
            records=self.assembler.records,
            written=written,
        )
