"""Audio processing: silence detection and segment extraction with ffmpeg."""
