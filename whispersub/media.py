"""Probes, converts and splits media files using ffmpeg."""

import ffmpeg
import os
import logging
from typing import Optional

from .exceptions import MediaToolError

logger = logging.getLogger(__name__)

class MediaTool:
    """Thin wrapper around ffmpeg/ffprobe for the operations the pipeline needs."""

    def __init__(self, ffmpeg_path: Optional[str] = None, ffprobe_path: Optional[str] = None, log_spawn: bool = False):
        """
        Initializes the MediaTool.

        Args:
            ffmpeg_path: Optional path to the ffmpeg executable.
                         If None, assumes ffmpeg is in the system PATH.
            ffprobe_path: Optional path to the ffprobe executable.
            log_spawn: If True, ffmpeg/ffprobe write to the console instead of
                       having their output captured.
        """
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        self.ffprobe_cmd = ffprobe_path or 'ffprobe'
        self.log_spawn = log_spawn
        logger.info(f"Using ffmpeg command: {self.ffmpeg_cmd}, ffprobe command: {self.ffprobe_cmd}")

    def probe_duration(self, media_path: str) -> int:
        """
        Returns the duration of a media file in whole seconds (truncated).

        Raises:
            MediaToolError: If ffprobe fails or reports no duration.
        """
        logger.debug(f"Probing duration of {media_path}")
        try:
            info = ffmpeg.probe(media_path, cmd=self.ffprobe_cmd)
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffprobe stderr: {stderr_output}")
            raise MediaToolError(f"ffprobe failed for {media_path}: {stderr_output}") from e
        except OSError as e:
            raise MediaToolError(f"Could not run {self.ffprobe_cmd}: {e}") from e

        try:
            duration = int(float(info['format']['duration']))
        except (KeyError, TypeError, ValueError) as e:
            raise MediaToolError(f"ffprobe reported no duration for {media_path}") from e
        logger.info(f"Duration of {media_path}: {duration}s")
        return duration

    def extract_audio(self, media_path: str, output_path: str) -> str:
        """
        Converts the input media into an audio file (format chosen by the output extension).

        Returns:
            ``output_path``.

        Raises:
            FileNotFoundError: If the input file does not exist.
            MediaToolError: If ffmpeg fails.
        """
        if not os.path.exists(media_path):
            raise FileNotFoundError(f"Input media file not found: {media_path}")

        logger.info(f"Converting {media_path} to audio at {output_path}...")
        stream = ffmpeg.input(media_path).output(output_path, vn=None).overwrite_output()
        self._run(stream, output_path)
        logger.info(f"Successfully extracted audio to: {output_path}")
        return output_path

    def split(self, media_path: str, start_seconds: float, duration_seconds: float, output_path: str) -> str:
        """
        Writes ``duration_seconds`` of ``media_path`` starting at ``start_seconds``.

        Returns:
            ``output_path``.

        Raises:
            MediaToolError: If ffmpeg fails.
        """
        logger.info(f"Splitting {media_path} [{start_seconds:.2f}s +{duration_seconds:.2f}s] -> {output_path}")
        stream = (
            ffmpeg
            .input(media_path)
            .output(output_path, ss=start_seconds, t=duration_seconds)
            .overwrite_output()
        )
        self._run(stream, output_path)
        return output_path

    def _run(self, stream, output_path: str) -> None:
        capture = not self.log_spawn
        try:
            stream.run(cmd=self.ffmpeg_cmd, capture_stdout=capture, capture_stderr=capture)
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffmpeg stderr: {stderr_output}")
            self._remove_partial(output_path)
            raise MediaToolError(f"ffmpeg failed writing {output_path}: {stderr_output}") from e
        except OSError as e:
            self._remove_partial(output_path)
            raise MediaToolError(f"Could not run {self.ffmpeg_cmd}: {e}") from e

    @staticmethod
    def _remove_partial(output_path: str) -> None:
        # A leftover file would be taken as a finished step on the next run
        if os.path.exists(output_path):
            try:
                os.remove(output_path)
            except OSError:
                logger.warning(f"Could not clean up partially created file: {output_path}")
