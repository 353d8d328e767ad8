import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from .config import LivenessConfig
from .models.annotations import AnnotationResult, FaceDetection, ObjectDetection
from .models.verdict import EvaluationFault, Verdict, VerdictReason

logger = logging.getLogger(__name__)

# Relative slack for threshold comparisons so that decimal inputs are judged at face value
REL_TOLERANCE = 1e-9


@dataclass(frozen=True)
class PresenceResult:
    """
    Outcome of the presence-consistency check.
    The durations describe the first violating face, if any.
    """
    consistent: bool
    face_index: Optional[int] = None
    tracked_duration: float = 0.0
    total_duration: float = 0.0


@dataclass(frozen=True)
class MovementResult:
    """
    Outcome of the natural-movement check.
    ``position_index`` points at the position the face jumped to.
    """
    natural: bool
    face_index: Optional[int] = None
    position_index: Optional[int] = None
    jump: float = 0.0


@dataclass(frozen=True)
class ObjectScanResult:
    suspicious_labels: Tuple[str, ...] = ()

    @property
    def clean(self) -> bool:
        return not self.suspicious_labels


def _is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


def _exceeds(value: float, limit: float) -> bool:
    return value > limit and not math.isclose(value, limit, rel_tol=REL_TOLERANCE)


def _falls_short(value: float, limit: float) -> bool:
    return value < limit and not math.isclose(value, limit, rel_tol=REL_TOLERANCE)


class LivenessEvaluator:
    """
    Decides from face and object annotations whether a video shows a live person.

    The evaluator holds nothing but its configuration, so one instance can
    serve any number of concurrent callers.
    """

    def __init__(self, config: Optional[LivenessConfig] = None):
        self.config = config if config is not None else LivenessConfig()

    def check_presence_consistency(self, face_detections: Sequence[FaceDetection]) -> PresenceResult:
        """
        Checks that every face is tracked for most of the time span it covers.

        Args:
            face_detections: Face detections of the video.

        Returns:
            The result for the first face that is not consistently present,
            or a consistent result when there is none.
        """
        for index, face in enumerate(face_detections):
            if not face.tracks:
                logger.warning(f"No tracks found for face detection {index}.")
                continue

            total_duration = (max(track.segment_end for track in face.tracks) -
                              min(track.segment_start for track in face.tracks))
            tracked_duration = sum(track.duration for track in face.tracks)

            if _falls_short(tracked_duration, total_duration * self.config.min_presence_ratio):
                logger.info(
                    f"Face {index} not consistently present: tracked {tracked_duration:.3f}s "
                    f"of {total_duration:.3f}s"
                )
                return PresenceResult(False, index, tracked_duration, total_duration)

        return PresenceResult(True)

    def check_natural_movement(self, face_detections: Sequence[FaceDetection]) -> MovementResult:
        """
        Checks that the face does not jump between consecutive positions.

        Only the first track of each face is inspected.

        Args:
            face_detections: Face detections of the video.

        Returns:
            The result for the first jump found, or a natural result.
        """
        max_jump = self.config.max_position_jump

        for index, face in enumerate(face_detections):
            if not face.tracks:
                continue

            positions = face.tracks[0].positions
            if len(positions) < 2:
                logger.warning(
                    f"Not enough timestamped positions to check for natural movements (face {index})."
                )
                continue

            for step in range(1, len(positions)):
                previous = positions[step - 1].box
                current = positions[step].box
                jump = max(abs(current.left - previous.left), abs(current.top - previous.top))
                if _exceeds(jump, max_jump):
                    logger.info(
                        f"Unnatural movements detected: face {index} moved {jump:.3f} "
                        f"at position {step}"
                    )
                    return MovementResult(False, index, step, jump)

        return MovementResult(True)

    def scan_objects(self, object_detections: Sequence[ObjectDetection]) -> ObjectScanResult:
        """
        Finds objects that look like spoofing props (phones, screens, printouts).
        Allow-listed wearables are never reported.
        """
        suspicious = tuple(
            obj.label for obj in object_detections
            if not self.config.is_allowed(obj.label) and self.config.matching_keywords(obj.label)
        )
        return ObjectScanResult(suspicious)

    def find_fault(self, annotation_result: AnnotationResult) -> Optional[EvaluationFault]:
        """
        Looks for annotation data the checks cannot be trusted on.
        """
        for face_index, face in enumerate(annotation_result.face_detections):
            for track_index, track in enumerate(face.tracks):
                where = f"face {face_index} track {track_index}"
                if not (_is_finite_number(track.segment_start) and _is_finite_number(track.segment_end)):
                    return EvaluationFault(f"{where} has a non-numeric segment")
                if track.segment_end < track.segment_start:
                    return EvaluationFault(
                        f"{where} ends at {track.segment_end}s before it starts at {track.segment_start}s"
                    )
                for position_index, position in enumerate(track.positions):
                    if not (_is_finite_number(position.box.left) and _is_finite_number(position.box.top)):
                        return EvaluationFault(f"{where} position {position_index} has a non-numeric box")

        for object_index, obj in enumerate(annotation_result.object_detections):
            if not isinstance(obj.label, str):
                return EvaluationFault(f"object {object_index} has a non-text label")

        return None

    def assess(self, annotation_result: AnnotationResult) -> Union[Verdict, EvaluationFault]:
        """
        Runs the checks in order and stops at the first failing one.

        Returns:
            A verdict, or the fault that made the annotation data unusable.
        """
        face_detections = annotation_result.face_detections
        object_detections = annotation_result.object_detections
        logger.info(f"FaceDetectionAnnotations count: {len(face_detections)}")
        logger.info(f"ObjectAnnotations count: {len(object_detections)}")

        fault = self.find_fault(annotation_result)
        if fault is not None:
            return fault

        if not face_detections:
            logger.warning("No faces detected in the video.")
            return Verdict.failure(VerdictReason.NO_FACE_DETECTED)

        # A spoofing prop in frame is conclusive whatever the face looks like
        scan = self.scan_objects(object_detections)
        if not scan.clean:
            logger.info(f"Suspicious objects detected: {', '.join(scan.suspicious_labels)}")
            return Verdict.failure(VerdictReason.MALICIOUS_OBJECT_DETECTED)

        if not self.check_presence_consistency(face_detections).consistent:
            return Verdict.failure(VerdictReason.INCONSISTENT_PRESENCE_OR_MOVEMENT)

        if not self.check_natural_movement(face_detections).natural:
            return Verdict.failure(VerdictReason.INCONSISTENT_PRESENCE_OR_MOVEMENT)

        return Verdict.success()

    def evaluate(self, annotation_result: AnnotationResult) -> Verdict:
        """
        Liveness verdict for the given annotations. Never raises.
        """
        try:
            outcome = self.assess(annotation_result)
        except Exception as e:
            logger.error(f"An error occurred while validating liveness: {e}", exc_info=True)
            return Verdict.failure(VerdictReason.EVALUATION_ERROR)

        if isinstance(outcome, EvaluationFault):
            logger.error(f"Annotation data rejected: {outcome.detail}")
            return outcome.to_verdict()

        return outcome
