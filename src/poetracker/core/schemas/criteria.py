"""Criteria checklist type shared by tasks and assessments."""

from typing import Annotated

from pydantic import Field, StrictBool, StrictFloat, StrictInt, StrictStr

# Closed variant: booleans for met / not met, numbers or text for scored or
# annotated criteria. Strict types keep ``true`` from being read as ``1``.
CriterionValue = StrictBool | StrictInt | StrictFloat | Annotated[StrictStr, Field(max_length=500)]

CriteriaChecklist = dict[str, CriterionValue]
