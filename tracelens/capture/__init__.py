from tracelens.capture.recorder import TraceRecorder

__all__ = ["TraceRecorder"]
