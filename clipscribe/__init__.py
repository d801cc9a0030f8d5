"""ClipScribe: record or pick an audio clip, transcribe it with Gemini, edit and copy the text."""

__version__ = "0.1.0"
