from docintake.schemas.models import FieldDescriptor, FieldType, TargetSchema

STUDY_LEVELS = ("bac", "bac+1", "bac+2", "bac+3", "bac+4", "bac+5", "bac+6", "doctorat")
CONTRACT_TYPES = ("stage", "alternance", "apprentissage")

RESUME_SCHEMA = TargetSchema(
    name="resume",
    entity_type="cv",
    description=(
        "Tu es un expert en extraction de données de CV pour des candidats "
        "recherchant des stages ou alternances."
    ),
    fields=(
        FieldDescriptor("firstName", FieldType.STRING, "Prénom du candidat"),
        FieldDescriptor("lastName", FieldType.STRING, "Nom du candidat"),
        FieldDescriptor("phone", FieldType.STRING, "Numéro de téléphone"),
        FieldDescriptor("school", FieldType.STRING, "École ou université"),
        FieldDescriptor(
            "studyLevel",
            FieldType.ENUM,
            "Niveau d'études actuel déduit du CV",
            enum_values=STUDY_LEVELS,
        ),
        FieldDescriptor("specialization", FieldType.STRING, "Spécialisation/filière d'études"),
        FieldDescriptor(
            "locations", FieldType.STRING_ARRAY, "Villes souhaitées pour travailler"
        ),
        FieldDescriptor(
            "contractType", FieldType.ENUM, "Type de contrat recherché",
            enum_values=CONTRACT_TYPES,
        ),
        FieldDescriptor(
            "availableFrom", FieldType.STRING,
            "Date de disponibilité au format YYYY-MM-DD si trouvée",
        ),
        FieldDescriptor(
            "skills", FieldType.STRING_ARRAY,
            "Compétences techniques (langages, outils) et soft skills",
        ),
        FieldDescriptor("linkedinUrl", FieldType.STRING, "URL LinkedIn si trouvée"),
        FieldDescriptor("portfolioUrl", FieldType.STRING, "URL portfolio ou site web si trouvée"),
        FieldDescriptor(
            "bio", FieldType.STRING, "Synthèse du profil du candidat en 2-3 phrases"
        ),
    ),
)
