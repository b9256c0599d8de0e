"""Streaming MP3 conversion through an ffmpeg subprocess"""
import asyncio
import logging
from typing import AsyncIterator, Dict, List, Optional

import httpx

from .. import config
from ..errors import TranscodeFailureError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

CODEC_ARGS: Dict[str, List[str]] = {
    "mp3": ["-vn", "-acodec", "libmp3lame", "-f", "mp3"],
}


class Transcoder:
    """Pipes a byte stream through ffmpeg and yields the encoded output.

    Input is written to stdin as it arrives and output is yielded as ffmpeg
    produces it; nothing is buffered beyond the pipe buffers. When the
    consumer stops iterating (client disconnect, upstream failure) the
    encoder is killed and reaped.
    """

    def __init__(
        self,
        ffmpeg_path: str = config.FFMPEG_LOCATION,
        chunk_size: int = config.STREAM_CHUNK_SIZE
    ):
        self.ffmpeg_path = ffmpeg_path
        self.chunk_size = chunk_size

    def build_command(self, target_codec: str) -> List[str]:
        if target_codec not in CODEC_ARGS:
            raise TranscodeFailureError(f"Conversion to {target_codec} is not supported.")
        return [
            self.ffmpeg_path,
            "-hide_banner",
            "-loglevel", "error",
            "-i", "pipe:0",
            *CODEC_ARGS[target_codec],
            "pipe:1",
        ]

    async def _feed(self, process, source: AsyncIterator[bytes]) -> Optional[BaseException]:
        """Copy the source into ffmpeg's stdin, returning any upstream error"""
        try:
            async for chunk in source:
                try:
                    process.stdin.write(chunk)
                    await process.stdin.drain()
                except (BrokenPipeError, ConnectionResetError):
                    # ffmpeg exited early; its exit code tells the rest
                    return None
        except Exception as e:
            return e
        finally:
            if not process.stdin.is_closing():
                process.stdin.close()
        return None

    async def transcode(
        self,
        source: AsyncIterator[bytes],
        target_codec: str = "mp3"
    ) -> AsyncIterator[bytes]:
        command = self.build_command(target_codec)
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Could not start ffmpeg (%s): %s", self.ffmpeg_path, e)
            raise TranscodeFailureError()

        feeder = asyncio.create_task(self._feed(process, source))
        stderr_reader = asyncio.create_task(process.stderr.read())
        produced = False
        try:
            while True:
                chunk = await process.stdout.read(self.chunk_size)
                if not chunk:
                    break
                produced = True
                yield chunk

            upstream_error = await feeder
            return_code = await process.wait()
            stderr = (await stderr_reader).decode("utf-8", "replace").strip()

            if isinstance(upstream_error, httpx.HTTPError) and not produced:
                logger.warning("Source stream failed before any output: %s", upstream_error)
                raise UpstreamUnavailableError()
            if upstream_error is not None:
                logger.error("Source stream failed during conversion: %s", upstream_error)
                raise TranscodeFailureError()
            if return_code != 0:
                logger.error("ffmpeg exited with code %s: %s", return_code, stderr[-500:])
                raise TranscodeFailureError()
        finally:
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()
            pending = [task for task in (feeder, stderr_reader) if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            aclose = getattr(source, "aclose", None)
            if aclose is not None:
                await aclose()
