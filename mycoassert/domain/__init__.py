from mycoassert.domain.enums import IssueKind, PrimitiveType, RuleName, TransformName

__all__ = ["IssueKind", "PrimitiveType", "RuleName", "TransformName"]
