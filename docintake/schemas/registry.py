from docintake.schemas.job_offer import JOB_OFFER_SCHEMA
from docintake.schemas.models import TargetSchema
from docintake.schemas.resume import RESUME_SCHEMA

SCHEMAS: dict[str, TargetSchema] = {
    "resume": RESUME_SCHEMA,
    "job_offer": JOB_OFFER_SCHEMA,
}


def get_schema(entity: str) -> TargetSchema:
    schema = SCHEMAS.get(entity.lower())
    if schema is None:
        raise ValueError(f"Unknown entity '{entity}'. Choose from: {list(SCHEMAS)}")
    return schema
