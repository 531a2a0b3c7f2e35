"""Orchestrates the chunked media-to-subtitle pipeline."""

import logging
import os
import time
from typing import Dict

from tqdm import tqdm

from .config import AppConfig
from .exceptions import FileSystemError, WhisperSubError
from .media import MediaTool
from .models import ChunkJob, ChunkSpec, ChunkState, JobContext
from .planner import plan_chunks
from .scheduler import TaskScheduler
from .srt_codec import parse_srt, renumber_srt, serialize_srt
from .text_extractor import to_plain_text
from .timeline import shift_and_clamp, strip_trailing_period
from .transcriber import Transcriber
from .utils import derive_path, read_text, remove_files, write_text

logger = logging.getLogger(__name__)

AUDIO_EXTENSION = 'mp3'

class SubtitleGenerator:
    """
    Turns one media file into merged subtitle files.

    The audio is split into chunks that fit the provider's upload limit.
    Each chunk is transcribed on its own, its cue timings are moved onto the
    source timeline, and the chunk outputs are merged in chunk order.

    Every intermediate file is written next to the source and doubles as a
    resume marker: an existing intermediate audio, chunk audio or chunk
    transcript is reused instead of being produced again.
    """

    def __init__(self, config: AppConfig, media_tool: MediaTool, transcriber: Transcriber):
        """
        Initializes the SubtitleGenerator.

        Args:
            config: Settings for the run.
            media_tool: Probes, converts and splits media.
            transcriber: Turns chunk audio into SRT text.
        """
        self.config = config
        self.media_tool = media_tool
        self.transcriber = transcriber
        self.chunk_scheduler = TaskScheduler(config.max_concurrency, name="chunk")
        self.format_scheduler = TaskScheduler(config.format_concurrency, name="format")

    def output_paths(self, media_path: str) -> Dict[str, str]:
        """Final output path per configured format, e.g. {'srt': '/a/talk.srt'}."""
        return {fmt: derive_path(media_path, '', fmt) for fmt in self.config.formats}

    def _chunk_job(self, media_path: str, spec: ChunkSpec) -> ChunkJob:
        suffix = f"_chunk_{spec.index}"
        return ChunkJob(
            spec=spec,
            audio_path=derive_path(media_path, suffix, AUDIO_EXTENSION),
            transcript_path=derive_path(media_path, suffix, 'srt'),
            output_paths={fmt: derive_path(media_path, suffix, fmt) for fmt in self.config.formats},
        )

    def _advance(self, job: ChunkJob, state: ChunkState) -> None:
        logger.debug(f"Chunk {job.spec.index}: {job.state.value} -> {state.value}")
        job.state = state

    def generate(self, media_path: str) -> Dict[str, str]:
        """
        Executes the full subtitle generation pipeline for a single media file.

        Args:
            media_path: Path to the input audio/video file.

        Returns:
            Mapping of output format to the path of the written file.

        Raises:
            FileSystemError: If the input is missing or files cannot be read/written.
            MediaToolError: If ffmpeg/ffprobe fails.
            TranscriptionError: If the provider rejects a chunk.
            FormatError: If a transcript is not valid SRT.
        """
        start_time = time.time()
        logger.info(f"--- Starting subtitle generation for: {media_path} ---")
        if not os.path.isfile(media_path):
            raise FileSystemError(f"Input media file not found: {media_path}")

        context = JobContext(
            source_path=media_path,
            audio_path=derive_path(media_path, '_tmp', AUDIO_EXTENSION),
            formats=list(self.config.formats),
            prompt=self.config.read_prompt(),
        )
        logger.info(f"Formats: {', '.join(context.formats)}")
        logger.info(f"Language: {self.config.language or 'not set'}")
        logger.info(f"Custom prompt: {'set' if context.prompt else 'not set'}")

        # 1. Convert to audio
        self._prepare_audio(context)

        # 2. Plan chunks
        try:
            audio_size = os.path.getsize(context.audio_path)
        except OSError as e:
            raise FileSystemError(f"Could not stat {context.audio_path}: {e}") from e
        duration = self.media_tool.probe_duration(context.audio_path)
        specs = plan_chunks(audio_size, duration, self.config.chunk_byte_budget)
        context.chunk_count = len(specs)

        # 3. Process chunks
        jobs = [self._chunk_job(media_path, spec) for spec in specs]
        with tqdm(total=len(jobs), unit="chunk", desc=os.path.basename(media_path)) as pbar:
            tasks = [self._chunk_task(context, job, pbar) for job in jobs]
            self.chunk_scheduler.run(tasks)

        # 4. Merge and renumber
        outputs = self._merge(context)

        if not self.config.keep_intermediate_audio:
            remove_files([context.audio_path])

        logger.info(f"--- Subtitle generation completed in {time.time() - start_time:.2f} seconds ---")
        return outputs

    def _prepare_audio(self, context: JobContext) -> None:
        if os.path.exists(context.audio_path):
            logger.warning(f"Audio file already exists, reusing: {context.audio_path}")
            return
        logger.info(f"Converting to audio: {context.audio_path}")
        self.media_tool.extract_audio(context.source_path, context.audio_path)

    def _chunk_task(self, context: JobContext, job: ChunkJob, pbar: tqdm):
        def task() -> Dict[str, str]:
            results = self._process_chunk(context, job)
            pbar.update(1)
            return results
        return task

    def _process_chunk(self, context: JobContext, job: ChunkJob) -> Dict[str, str]:
        """Runs one chunk from PENDING to CLEANED and returns its text per format."""
        spec = job.spec
        logger.info(
            f"Chunk {spec.index + 1}/{context.chunk_count}: "
            f"{spec.start_offset_seconds:.2f}s +{spec.duration_seconds:.2f}s"
        )

        self._split(context, job)
        raw_srt = self._transcribe(context, job)

        format_tasks = [self._format_task(job, fmt, raw_srt) for fmt in context.formats]
        for fmt, text in zip(context.formats, self.format_scheduler.run(format_tasks)):
            job.results[fmt] = text
        self._advance(job, ChunkState.REALIGNED)

        for fmt, text in job.results.items():
            context.accumulate(fmt, spec.index, text)
        self._advance(job, ChunkState.MERGED)

        remove_files(job.temp_paths())
        self._advance(job, ChunkState.CLEANED)
        return job.results

    def _split(self, context: JobContext, job: ChunkJob) -> None:
        if os.path.exists(job.audio_path):
            logger.warning(f"Chunk audio already exists, reusing: {job.audio_path}")
        elif os.path.exists(job.transcript_path):
            logger.info(f"Chunk transcript already exists, skipping split: {job.transcript_path}")
        else:
            self.media_tool.split(
                context.audio_path,
                job.spec.start_offset_seconds,
                job.spec.duration_seconds,
                job.audio_path,
            )
        self._advance(job, ChunkState.SPLIT)

    def _transcribe(self, context: JobContext, job: ChunkJob) -> str:
        if os.path.exists(job.transcript_path):
            logger.warning(f"Chunk transcript already exists, reusing: {job.transcript_path}")
            raw_srt = read_text(job.transcript_path)
        else:
            try:
                with open(job.audio_path, 'rb') as f:
                    audio = f.read()
            except OSError as e:
                raise FileSystemError(f"Could not read chunk audio {job.audio_path}: {e}") from e
            raw_srt = self.transcriber.transcribe(
                audio,
                os.path.basename(job.audio_path),
                language=self.config.language,
                prompt=context.prompt,
            )
            write_text(job.transcript_path, raw_srt)
        self._advance(job, ChunkState.TRANSCRIBED)
        return raw_srt

    def _format_task(self, job: ChunkJob, fmt: str, raw_srt: str):
        return lambda: self._render_chunk(job, fmt, raw_srt)

    def _render_chunk(self, job: ChunkJob, fmt: str, raw_srt: str) -> str:
        """Produces one chunk's contribution to the ``fmt`` output."""
        cues = parse_srt(raw_srt)
        if fmt == 'srt':
            if self.config.strip_trailing_period:
                strip_trailing_period(cues)
            shift_and_clamp(cues, job.spec.offset_ms, job.spec.ceiling_ms)
            return serialize_srt(cues)
        if fmt == 'txt':
            text = to_plain_text(cues)
            write_text(job.output_paths[fmt], text)
            return text
        raise WhisperSubError(f"Unsupported output format: {fmt}")

    def _merge(self, context: JobContext) -> Dict[str, str]:
        """Writes each format's merged output; SRT is then renumbered in a second pass."""
        outputs = self.output_paths(context.source_path)
        for fmt, output_path in outputs.items():
            merged = context.merged_text(fmt)
            write_text(output_path, merged)
            if fmt == 'srt':
                write_text(output_path, renumber_srt(merged))
            logger.info(f"Subtitles saved to: {output_path}")
        return outputs

