"""Video Job Orchestrator - thumbnail and transcode jobs driven by ffmpeg."""

__version__ = "0.1.0"
