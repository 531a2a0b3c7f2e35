"""whispersub: chunked media-to-subtitle transcription with the OpenAI API."""

__version__ = "0.1.0"
