from typing import Any, List, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..models.annotations import (
    AnnotationResult,
    BoundingBox,
    FaceDetection,
    ObjectDetection,
    TimestampedBox,
    Track,
)


def _to_float(value: Any, name: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise ValueError(f"'{name}' must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"'{name}' must be a number, got {value!r}") from e


def parse_duration(value: Any) -> float:
    """
    Converts a protobuf Duration to seconds.

    Args:
        value: A proto JSON string such as "1.500s", a {"seconds", "nanos"}
               object, a plain number, or None for a zero duration.

    Returns:
        The duration in seconds.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("s"):
            text = text[:-1]
        return _to_float(text, "duration")
    if isinstance(value, Mapping):
        seconds = _to_float(value.get("seconds"), "seconds")
        nanos = _to_float(value.get("nanos"), "nanos")
        return seconds + nanos / 1e9
    return _to_float(value, "duration")


class ProviderModel(BaseModel):
    """
    Base for provider messages. Accepts proto JSON names (camelCase)
    as well as proto field names (snake_case).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NormalizedBoundingBox(ProviderModel):
    left: float = 0.0
    top: float = 0.0

    @field_validator("left", "top", mode="before")
    @classmethod
    def coerce_coordinate(cls, value, info):
        return _to_float(value, info.field_name)


class TimestampedObject(ProviderModel):
    normalized_bounding_box: NormalizedBoundingBox = Field(default_factory=NormalizedBoundingBox)
    time_offset: float = 0.0

    @field_validator("time_offset", mode="before")
    @classmethod
    def coerce_duration(cls, value):
        return parse_duration(value)


class VideoSegment(ProviderModel):
    start_time_offset: float = 0.0
    end_time_offset: float = 0.0

    @field_validator("start_time_offset", "end_time_offset", mode="before")
    @classmethod
    def coerce_duration(cls, value):
        return parse_duration(value)


class FaceTrack(ProviderModel):
    segment: VideoSegment = Field(default_factory=VideoSegment)
    timestamped_objects: List[TimestampedObject] = Field(default_factory=list)

    def to_track(self) -> Track:
        return Track(
            segment_start=self.segment.start_time_offset,
            segment_end=self.segment.end_time_offset,
            positions=tuple(
                TimestampedBox(
                    box=BoundingBox(
                        left=obj.normalized_bounding_box.left,
                        top=obj.normalized_bounding_box.top,
                    ),
                    time_offset=obj.time_offset,
                )
                for obj in self.timestamped_objects
            ),
        )


class FaceDetectionAnnotation(ProviderModel):
    tracks: List[FaceTrack] = Field(default_factory=list)


class Entity(ProviderModel):
    description: str = ""


class ObjectTrackingAnnotation(ProviderModel):
    entity: Entity = Field(default_factory=Entity)


class VideoAnnotationResults(ProviderModel):
    """
    Annotations of one video. Fields the evaluator does not read are ignored.
    """
    face_detection_annotations: List[FaceDetectionAnnotation] = Field(default_factory=list)
    object_annotations: List[ObjectTrackingAnnotation] = Field(default_factory=list)

    def to_annotation_result(self) -> AnnotationResult:
        return AnnotationResult(
            face_detections=tuple(
                FaceDetection(tracks=tuple(track.to_track() for track in face.tracks))
                for face in self.face_detection_annotations
            ),
            object_detections=tuple(
                ObjectDetection(label=obj.entity.description) for obj in self.object_annotations
            ),
        )


class AnnotateVideoResponse(ProviderModel):
    annotation_results: List[VideoAnnotationResults] = Field(default_factory=list)
