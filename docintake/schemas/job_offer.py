from docintake.schemas.models import FieldDescriptor, FieldType, TargetSchema
from docintake.schemas.resume import CONTRACT_TYPES

OFFER_STUDY_LEVELS = ("L3", "M1", "M2", "MBA")
DEFAULT_TITLE = "Offre de stage"
DEFAULT_CONTRACT_TYPE = "stage"

JOB_OFFER_SCHEMA = TargetSchema(
    name="job_offer",
    entity_type="offer",
    description=(
        "Tu es un expert en extraction de données de fiches de poste pour des "
        "stages en finance."
    ),
    fields=(
        FieldDescriptor("title", FieldType.STRING, "Titre du poste", default=DEFAULT_TITLE),
        FieldDescriptor("description", FieldType.STRING, "Description du poste"),
        FieldDescriptor("missions", FieldType.STRING_ARRAY, "Missions du poste"),
        FieldDescriptor("objectives", FieldType.STRING, "Objectifs du poste"),
        FieldDescriptor(
            "studyLevels", FieldType.ENUM_ARRAY, "Niveaux d'études visés",
            enum_values=OFFER_STUDY_LEVELS,
        ),
        FieldDescriptor("skills", FieldType.STRING_ARRAY, "Compétences attendues"),
        FieldDescriptor(
            "contractType", FieldType.ENUM, "Type de contrat",
            default=DEFAULT_CONTRACT_TYPE, enum_values=CONTRACT_TYPES,
        ),
        FieldDescriptor("duration", FieldType.STRING, "Durée, ex: '6 mois'"),
        FieldDescriptor("startDate", FieldType.STRING, "Date de début, ex: 'Janvier 2025'"),
        FieldDescriptor("location", FieldType.STRING, "Lieu, ex: 'Paris'"),
        FieldDescriptor("salary", FieldType.STRING, "Rémunération, ex: '1500€/mois'"),
    ),
)
