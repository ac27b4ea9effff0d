"""
Leaf Classifier - Turn one atomic prerequisite phrase into a leaf.

Recognized shapes:
- "<id> ( min <kind> = <grade> )"  course (kind "grade") or exam with a minimum
- "<id> ( coreq )"                 corequisite
- "AP ..."                         exam
- "<DEPT> <number>"                course
- "NO ..."                         antirequisite (any of the above, or an AP score bound)

Phrases matching none of these are not guessed at; the caller decides
what to do with them.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .models import (
    CoursePrerequisite,
    CourseCorequisite,
    ExamPrerequisite,
    Prerequisite,
)

ANTIREQUISITE_PREFIX = "NO "


@dataclass(frozen=True)
class ClassifiedLeaf:
    """A recognized leaf and whether it belongs in the NOT branch."""
    prerequisite: Prerequisite
    antirequisite: bool = False


class LeafClassifier:
    """
    Regex-driven classifier for single prerequisite tokens.

    Tokens are expected to be trimmed, with whitespace already collapsed.
    """

    MIN_GRADE_PATTERN = re.compile(r'^([^()]+)\s+\( min (\S+) = (\S{1,2}) \)$')
    COREQ_PATTERN = re.compile(r'^([^()]+)\s+\( coreq \)$')
    COURSE_PATTERN = re.compile(r'^[A-Z0-9&/\s]+\d\S*$')
    ANTI_EXAM_SCORE_PATTERN = re.compile(r'^NO\s(AP\s.+?)\sscore\sof\s(\d)\sor\sgreater$')

    def classify(self, token: str) -> Optional[ClassifiedLeaf]:
        """
        Classify a token, routing "NO ..." tokens to antirequisite handling.

        Returns:
            ClassifiedLeaf, or None if the token has no recognized shape
        """
        token = token.strip()
        if is_antirequisite(token):
            leaf = self.classify_antirequisite(token)
            return ClassifiedLeaf(leaf, antirequisite=True) if leaf else None

        leaf = self.classify_prerequisite(token)
        return ClassifiedLeaf(leaf) if leaf else None

    def classify_prerequisite(self, token: str) -> Optional[Prerequisite]:
        """Classify an ordinary (non-negated) token."""
        grade_match = self.MIN_GRADE_PATTERN.match(token)
        if grade_match:
            identifier, kind, grade = (g.strip() for g in grade_match.groups())
            # "min grade" marks a course; any other kind ("min score") an exam
            if kind == "grade":
                return CoursePrerequisite(course_id=identifier, min_grade=grade)
            return ExamPrerequisite(exam_name=identifier, min_grade=grade)

        coreq_match = self.COREQ_PATTERN.match(token)
        if coreq_match:
            return CourseCorequisite(course_id=coreq_match.group(1).strip())

        if token.startswith("AP"):
            return ExamPrerequisite(exam_name=token)

        if self.COURSE_PATTERN.match(token):
            return CoursePrerequisite(course_id=token)

        return None

    def classify_antirequisite(self, token: str) -> Optional[Prerequisite]:
        """
        Classify a "NO ..." token.

        "NO AP <exam> score of <n> or greater" bounds the exam score; any
        other remainder is classified like an ordinary token.
        """
        score_match = self.ANTI_EXAM_SCORE_PATTERN.match(token)
        if score_match:
            return ExamPrerequisite(
                exam_name=score_match.group(1).strip(),
                min_grade=score_match.group(2).strip(),
            )

        remainder = token[len(ANTIREQUISITE_PREFIX):].strip() if is_antirequisite(token) else token
        return self.classify_prerequisite(remainder)


def is_antirequisite(token: str) -> bool:
    return token.startswith(ANTIREQUISITE_PREFIX)
