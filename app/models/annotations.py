from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    Normalized face location. Coordinates are fractions of the frame size.
    """
    left: float = 0.0
    top: float = 0.0


@dataclass(frozen=True)
class TimestampedBox:
    box: BoundingBox
    time_offset: float = 0.0


@dataclass(frozen=True)
class Track:
    """
    A time-bounded run of detections of the same face.

    Args:
        segment_start: Start of the segment in seconds.
        segment_end: End of the segment in seconds.
        positions: Chronologically ordered face positions within the segment.
    """
    segment_start: float
    segment_end: float
    positions: Tuple[TimestampedBox, ...] = ()

    @property
    def duration(self) -> float:
        return self.segment_end - self.segment_start


@dataclass(frozen=True)
class FaceDetection:
    tracks: Tuple[Track, ...] = ()


@dataclass(frozen=True)
class ObjectDetection:
    label: str


@dataclass(frozen=True)
class AnnotationResult:
    """
    Annotations of a single video as supplied by the annotation provider.
    """
    face_detections: Tuple[FaceDetection, ...] = field(default_factory=tuple)
    object_detections: Tuple[ObjectDetection, ...] = field(default_factory=tuple)
