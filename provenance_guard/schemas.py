from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


# One level of the triggering chain; parents nest under "parent"
class ContextPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")
    entity_name: Optional[str] = None
    operation_name: str = Field(min_length=1)
    execution_mode: Union[int, str] = "synchronous"
    execution_stage: Union[int, str] = "pre_operation"
    initiating_principal: Optional[str] = None
    context_id: Optional[str] = None
    parent: Optional["ContextPayload"] = None


ContextPayload.model_rebuild()


class EvaluationResponse(BaseModel):
    outcome: str
    kind: str
    message: str
    rule_name: str
    entity_name: Optional[str] = None
    operation_name: Optional[str] = None
    matched_operation: Optional[str] = None
    matched_depth: Optional[int] = None
    advisories: List[str] = Field(default_factory=list)


class RuleResponse(BaseModel):
    name: str
    applies_to_entity: str
    applies_to_operation: str
    approved_process: str
    required_mode: str
    recommended_stage: str
    violation_message: str
