"""
Built-in ISO catalog.

Clause trees for ISO 9001:2015 and ISO 27001:2022 (with the Annex A
controls the document catalog refers to), clause keywords used by the
section classifier, and the catalog of documents each standard expects an
organization to hold.

StaticCatalog serves all of it from memory; database.seed writes the same
data into the ISOClause and StandardDocument tables.
"""

from typing import Dict, List, Optional

from .interfaces import ClauseCatalog, RequirementCatalog
from .models import DocumentType, ISOClauseRecord, StandardRequirement, StandardType


ISO_9001_2015_CLAUSES = {
    "4": {
        "title": "Context of the organization",
        "subclauses": {
            "4.1": "Understanding the organization and its context",
            "4.2": "Understanding the needs and expectations of interested parties",
            "4.3": "Determining the scope of the quality management system",
            "4.4": "Quality management system and its processes",
        },
    },
    "5": {
        "title": "Leadership",
        "subclauses": {
            "5.1": "Leadership and commitment",
            "5.1.1": "General",
            "5.1.2": "Customer focus",
            "5.2": "Policy",
            "5.2.1": "Establishing the quality policy",
            "5.2.2": "Communicating the quality policy",
            "5.3": "Organizational roles, responsibilities and authorities",
        },
    },
    "6": {
        "title": "Planning",
        "subclauses": {
            "6.1": "Actions to address risks and opportunities",
            "6.2": "Quality objectives and planning to achieve them",
            "6.3": "Planning of changes",
        },
    },
    "7": {
        "title": "Support",
        "subclauses": {
            "7.1": "Resources",
            "7.1.1": "General",
            "7.1.2": "People",
            "7.1.3": "Infrastructure",
            "7.1.4": "Environment for the operation of processes",
            "7.1.5": "Monitoring and measuring resources",
            "7.1.6": "Organizational knowledge",
            "7.2": "Competence",
            "7.3": "Awareness",
            "7.4": "Communication",
            "7.5": "Documented information",
            "7.5.1": "General",
            "7.5.2": "Creating and updating",
            "7.5.3": "Control of documented information",
        },
    },
    "8": {
        "title": "Operation",
        "subclauses": {
            "8.1": "Operational planning and control",
            "8.2": "Requirements for products and services",
            "8.3": "Design and development of products and services",
            "8.4": "Control of externally provided processes, products and services",
            "8.5": "Production and service provision",
            "8.6": "Release of products and services",
            "8.7": "Control of nonconforming outputs",
        },
    },
    "9": {
        "title": "Performance evaluation",
        "subclauses": {
            "9.1": "Monitoring, measurement, analysis and evaluation",
            "9.1.1": "General",
            "9.1.2": "Customer satisfaction",
            "9.1.3": "Analysis and evaluation",
            "9.2": "Internal audit",
            "9.3": "Management review",
        },
    },
    "10": {
        "title": "Improvement",
        "subclauses": {
            "10.1": "General",
            "10.2": "Nonconformity and corrective action",
            "10.3": "Continual improvement",
        },
    },
}

ISO_27001_2022_CLAUSES = {
    "4": {
        "title": "Context of the organization",
        "subclauses": {
            "4.1": "Understanding the organization and its context",
            "4.2": "Understanding the needs and expectations of interested parties",
            "4.3": "Determining the scope of the information security management system",
            "4.4": "Information security management system",
        },
    },
    "5": {
        "title": "Leadership",
        "subclauses": {
            "5.1": "Leadership and commitment",
            "5.2": "Policy",
            "5.3": "Organizational roles, responsibilities and authorities",
        },
    },
    "6": {
        "title": "Planning",
        "subclauses": {
            "6.1": "Actions to address risks and opportunities",
            "6.1.1": "General",
            "6.1.2": "Information security risk assessment",
            "6.1.3": "Information security risk treatment",
            "6.2": "Information security objectives and planning to achieve them",
            "6.3": "Planning of changes",
        },
    },
    "7": {
        "title": "Support",
        "subclauses": {
            "7.1": "Resources",
            "7.2": "Competence",
            "7.3": "Awareness",
            "7.4": "Communication",
            "7.5": "Documented information",
            "7.5.1": "General",
            "7.5.2": "Creating and updating",
            "7.5.3": "Control of documented information",
        },
    },
    "8": {
        "title": "Operation",
        "subclauses": {
            "8.1": "Operational planning and control",
            "8.2": "Information security risk assessment",
            "8.3": "Information security risk treatment",
        },
    },
    "9": {
        "title": "Performance evaluation",
        "subclauses": {
            "9.1": "Monitoring, measurement, analysis and evaluation",
            "9.2": "Internal audit",
            "9.3": "Management review",
        },
    },
    "10": {
        "title": "Improvement",
        "subclauses": {
            "10.1": "Continual improvement",
            "10.2": "Nonconformity and corrective action",
        },
    },
}

ISO_27001_2022_ANNEX_A = {
    "A.5": {
        "title": "Organizational controls",
        "controls": {
            "A.5.1": "Policies for information security",
            "A.5.2": "Information security roles and responsibilities",
            "A.5.3": "Segregation of duties",
            "A.5.4": "Management responsibilities",
            "A.5.5": "Contact with authorities",
            "A.5.6": "Contact with special interest groups",
            "A.5.7": "Threat intelligence",
            "A.5.8": "Information security in project management",
            "A.5.9": "Inventory of information and other associated assets",
            "A.5.10": "Acceptable use of information and other associated assets",
            "A.5.11": "Return of assets",
            "A.5.12": "Classification of information",
            "A.5.13": "Labelling of information",
            "A.5.14": "Information transfer",
            "A.5.15": "Access control",
            "A.5.16": "Identity management",
            "A.5.17": "Authentication information",
            "A.5.18": "Access rights",
            "A.5.19": "Information security in supplier relationships",
            "A.5.20": "Addressing information security within supplier agreements",
            "A.5.21": "Managing information security in the ICT supply chain",
            "A.5.22": "Monitoring, review and change management of supplier services",
            "A.5.23": "Information security for use of cloud services",
            "A.5.24": "Information security incident management planning and preparation",
            "A.5.25": "Assessment and decision on information security events",
            "A.5.26": "Response to information security incidents",
            "A.5.27": "Learning from information security incidents",
            "A.5.28": "Collection of evidence",
            "A.5.29": "Information security during disruption",
            "A.5.30": "ICT readiness for business continuity",
            "A.5.31": "Legal, statutory, regulatory and contractual requirements",
            "A.5.32": "Intellectual property rights",
            "A.5.33": "Protection of records",
            "A.5.34": "Privacy and protection of PII",
            "A.5.35": "Independent review of information security",
            "A.5.36": "Compliance with policies, rules and standards for information security",
            "A.5.37": "Documented operating procedures",
        },
    },
    "A.6": {
        "title": "People controls",
        "controls": {
            "A.6.1": "Screening",
            "A.6.2": "Terms and conditions of employment",
            "A.6.3": "Information security awareness, education and training",
            "A.6.4": "Disciplinary process",
            "A.6.5": "Responsibilities after termination or change of employment",
            "A.6.6": "Confidentiality or non-disclosure agreements",
            "A.6.7": "Remote working",
            "A.6.8": "Information security event reporting",
        },
    },
    "A.7": {
        "title": "Physical controls",
        "controls": {
            "A.7.1": "Physical security perimeters",
            "A.7.2": "Physical entry",
            "A.7.3": "Securing offices, rooms and facilities",
            "A.7.4": "Physical security monitoring",
        },
    },
    "A.8": {
        "title": "Technological controls",
        "controls": {
            "A.8.1": "User endpoint devices",
            "A.8.2": "Privileged access rights",
            "A.8.3": "Information access restriction",
            "A.8.5": "Secure authentication",
            "A.8.7": "Protection against malware",
            "A.8.13": "Information backup",
            "A.8.15": "Logging",
            "A.8.16": "Monitoring activities",
        },
    },
}

# Keywords used to detect a clause in free text; shared by both standards
ISO_CLAUSE_KEYWORDS: Dict[str, List[str]] = {
    "4.1": ["context", "external issues", "internal issues", "strategic direction"],
    "4.2": ["interested parties", "stakeholders", "requirements", "expectations"],
    "4.3": ["scope", "boundaries", "applicability"],
    "4.4": ["processes", "interactions", "process approach"],
    "5.1": ["leadership", "commitment", "top management"],
    "5.2": ["policy", "quality policy", "information security policy"],
    "5.3": ["roles", "responsibilities", "authorities"],
    "6.1": ["risks", "opportunities", "risk assessment", "risk treatment"],
    "6.2": ["objectives", "planning", "measurable"],
    "7.1": ["resources", "infrastructure", "environment", "monitoring"],
    "7.2": ["competence", "training", "skills"],
    "7.3": ["awareness", "contribution", "implications"],
    "7.4": ["communication", "internal", "external"],
    "7.5": ["documented information", "documents", "records"],
    "8.1": ["operational", "planning", "control"],
    "9.1": ["monitoring", "measurement", "analysis", "evaluation"],
    "9.2": ["internal audit", "audit programme", "audit criteria"],
    "9.3": ["management review", "review inputs", "review outputs"],
    "10.1": ["improvement", "continual improvement"],
    "10.2": ["nonconformity", "corrective action", "root cause"],
}


def _requirement(standard: StandardType, index: int, **fields) -> StandardRequirement:
    prefix = "9001" if standard == StandardType.ISO_9001_2015 else "27001"
    return StandardRequirement(
        id=f"{prefix}-{index:02d}",
        title=fields["title"],
        standard=standard,
        category=fields.get("category", "Required"),
        description=fields.get("description"),
        clause_ref=fields.get("clause_ref"),
        importance=fields.get("importance"),
        keywords=tuple(fields.get("keywords", ())),
        clause_numbers=tuple(fields.get("clause_numbers", ())),
        document_type=fields.get("document_type", DocumentType.DOCUMENT),
        can_be_fulfilled_by=tuple(fields.get("can_be_fulfilled_by", ())),
        fulfills=tuple(fields.get("fulfills", ())),
    )


ISO_9001_DOCUMENTS = [
    dict(
        title="Quality Policy",
        description="Defines your quality commitment",
        clause_ref="5.2",
        importance="Defines your quality commitment and sets the direction for the QMS",
        keywords=["quality", "policy", "commitment", "direction", "statement"],
        clause_numbers=["5.2", "5.2.1", "5.2.2"],
        document_type=DocumentType.POLICY,
        can_be_fulfilled_by=["Quality Manual", "Quality & ISMS Manual"],
    ),
    dict(
        title="Quality Objectives",
        description="Measurable improvement goals",
        clause_ref="6.2",
        importance="Sets measurable targets for quality improvement",
        keywords=["quality", "objectives", "goals", "targets", "measurable", "improvement"],
        clause_numbers=["6.2", "6.2.1", "6.2.2"],
        document_type=DocumentType.PLAN,
        can_be_fulfilled_by=["Quality Manual", "Quality & ISMS Manual"],
    ),
    dict(
        title="Scope of the QMS",
        description="Defines what's covered in the QMS",
        clause_ref="4.3",
        importance="Clearly defines boundaries and applicability of the QMS",
        keywords=["scope", "qms", "boundaries", "applicability", "coverage"],
        clause_numbers=["4.3"],
    ),
    dict(
        title="Process Descriptions",
        description="Describes how key processes work",
        clause_ref="4.4",
        importance="Ensures consistent process execution and understanding",
        keywords=["process", "descriptions", "procedures", "workflow", "operations"],
        clause_numbers=["4.4", "4.4.1", "4.4.2"],
    ),
    dict(
        title="Document Control Procedure",
        description="Ensures control of documented info",
        clause_ref="7.5",
        importance="Manages document versions, access, and distribution",
        keywords=["document", "control", "procedure", "version", "access", "distribution"],
        clause_numbers=["7.5", "7.5.1", "7.5.2", "7.5.3"],
    ),
    dict(
        title="Internal Audit Plan / Schedule",
        description="Plans audits at planned intervals",
        clause_ref="9.2",
        importance="Ensures systematic evaluation of QMS effectiveness",
        keywords=["internal", "audit", "plan", "schedule", "intervals"],
        clause_numbers=["9.2", "9.2.1", "9.2.2"],
        document_type=DocumentType.PLAN,
    ),
    dict(
        title="Internal Audit Reports",
        description="Evidence of completed audits",
        clause_ref="9.2",
        importance="Documents audit findings and improvement opportunities",
        keywords=["internal", "audit", "reports", "findings", "evidence"],
        clause_numbers=["9.2", "9.2.1", "9.2.2"],
        document_type=DocumentType.REPORT,
    ),
    dict(
        title="Management Review Minutes",
        description="Shows top management involvement",
        clause_ref="9.3",
        importance="Demonstrates leadership commitment and strategic direction",
        keywords=["management", "review", "minutes", "leadership", "commitment"],
        clause_numbers=["9.3", "9.3.1", "9.3.2", "9.3.3"],
    ),
    dict(
        title="Nonconformity and Corrective Action Log",
        description="Captures issues and actions",
        clause_ref="10.2",
        importance="Tracks problems and ensures systematic resolution",
        keywords=["nonconformity", "corrective", "action", "log", "issues", "problems"],
        clause_numbers=["10.2", "10.2.1", "10.2.2"],
    ),
    dict(
        title="Customer Feedback / Complaints Log",
        description="Tracks customer satisfaction",
        clause_ref="9.1.2",
        importance="Monitors customer satisfaction and drives improvements",
        keywords=["customer", "feedback", "complaints", "satisfaction", "log"],
        clause_numbers=["9.1.2", "8.2.1"],
    ),
    dict(
        title="Training Records / Competency Matrix",
        description="Proves staff are qualified",
        clause_ref="7.2",
        importance="Ensures personnel have necessary competencies",
        keywords=["training", "records", "competency", "matrix", "qualified", "skills"],
        clause_numbers=["7.2", "7.2.1"],
        document_type=DocumentType.RECORD,
    ),
    dict(
        title="Supplier Evaluation Criteria or Logs",
        description="Manages outsourced providers",
        clause_ref="8.4",
        importance="Controls quality of external products and services",
        keywords=["supplier", "evaluation", "criteria", "logs", "outsourced", "external"],
        clause_numbers=["8.4", "8.4.1", "8.4.2", "8.4.3"],
    ),
    dict(
        title="Risk Log",
        category="Optional",
        description="Supports addressing risks and opportunities",
        clause_ref="6.1",
        importance="Proactively identifies and manages risks to quality",
        keywords=["risk", "log", "opportunities", "register", "assessment"],
        clause_numbers=["6.1", "6.1.1", "6.1.2"],
        document_type=DocumentType.LOG,
        can_be_fulfilled_by=["Risk Register", "Quality & ISMS Manual"],
    ),
    dict(
        title="Procedure Manuals",
        category="Optional",
        description="Helps ensure consistent execution of tasks",
        importance="Provides detailed work instructions for complex tasks",
        keywords=["procedure", "manuals", "instructions", "tasks", "workflow"],
    ),
    dict(
        title="Job Descriptions",
        category="Optional",
        description="Clarifies role expectations and supports competence",
        importance="Defines responsibilities and required competencies",
        keywords=["job", "descriptions", "role", "responsibilities", "competencies"],
    ),
    dict(
        title="Customer Journey Map",
        category="Optional",
        description="Visualises how customers interact with your process",
        importance="Enhances understanding of customer experience",
        keywords=["customer", "journey", "map", "experience", "interaction"],
    ),
    dict(
        title="Quality & ISMS Manual",
        category="Optional",
        description="Comprehensive manual covering quality management and information security",
        importance="Consolidates multiple policies and procedures into one comprehensive document",
        keywords=["quality", "isms", "manual", "comprehensive", "integrated"],
        document_type=DocumentType.MANUAL,
        fulfills=[
            "Quality Policy",
            "Quality Objectives",
            "Information Security Policy",
            "Scope of the QMS",
            "Process Descriptions",
        ],
    ),
]

ISO_27001_DOCUMENTS = [
    dict(
        title="Information Security Policy",
        description="Core ISMS policy",
        clause_ref="5.2",
        importance="Establishes management direction and support for information security",
        keywords=["information", "security", "policy", "isms", "cyber"],
        clause_numbers=["5.2", "5.2.1", "5.2.2"],
        document_type=DocumentType.POLICY,
        can_be_fulfilled_by=["Quality & ISMS Manual", "ISMS Manual"],
    ),
    dict(
        title="Statement of Applicability (SoA)",
        description="Lists applicable Annex A controls and justification",
        clause_ref="6.1.3",
        importance="Documents which controls are implemented and why others are excluded",
        keywords=["statement", "applicability", "soa", "controls", "annex", "statement of applicability"],
        clause_numbers=["6.1.3", "A.5", "A.6", "A.7", "A.8"],
    ),
    dict(
        title="Risk Assessment Procedure",
        description="Defines how risks are identified and evaluated",
        clause_ref="6.1.2",
        importance="Ensures consistent approach to identifying and assessing information security risks",
        keywords=["risk", "assessment", "procedure", "evaluation", "identification"],
        clause_numbers=["6.1.2", "6.1.2.1", "6.1.2.2"],
    ),
    dict(
        title="Risk Treatment Plan",
        description="Describes how selected controls mitigate risks",
        clause_ref="6.1.3",
        importance="Shows how identified risks will be addressed through controls",
        keywords=["risk", "treatment", "plan", "mitigation", "controls"],
        clause_numbers=["6.1.3", "6.1.3.1"],
    ),
    dict(
        title="Risk Register",
        description="Lists and tracks individual risks",
        clause_ref="6.1.2",
        importance="Central repository for all identified risks and their treatment status",
        keywords=["risk", "register", "log", "tracking", "repository"],
        clause_numbers=["6.1.2", "6.1.2.1", "6.1.2.2"],
        document_type=DocumentType.LOG,
        can_be_fulfilled_by=["Risk Log", "Quality & ISMS Manual"],
        fulfills=["Risk Log"],
    ),
    dict(
        title="Asset Inventory",
        description="Identifies assets and their owners",
        clause_ref="A.5.9, A.5.10",
        importance="Ensures all information assets are identified and have responsible owners",
        keywords=["asset", "inventory", "register", "owners", "classification"],
        clause_numbers=["A.5.9", "A.5.10", "A.5.8"],
    ),
    dict(
        title="Access Control Policy",
        description="Manages user access",
        clause_ref="A.5.15",
        importance="Controls who has access to information and systems",
        keywords=["access", "control", "policy", "user", "permissions"],
        clause_numbers=["A.5.15", "A.5.16", "A.6.1"],
    ),
    dict(
        title="Incident Management Procedure",
        description="Defines how security incidents are handled",
        clause_ref="A.5.24",
        importance="Ensures consistent and effective response to security incidents",
        keywords=["incident", "management", "procedure", "response", "security"],
        clause_numbers=["A.5.24", "A.5.25", "A.5.26"],
    ),
    dict(
        title="Business Continuity Plan",
        description="Ensures continuity during disruptions",
        clause_ref="A.5.30, A.5.31",
        importance="Maintains critical operations during adverse events",
        keywords=["business", "continuity", "plan", "disaster", "recovery"],
        clause_numbers=["A.5.30", "A.5.31", "A.5.29"],
    ),
    dict(
        title="Backup and Recovery Procedure",
        description="Ensures data resilience",
        clause_ref="A.5.12, A.5.31",
        importance="Protects against data loss and ensures recovery capability",
        keywords=["backup", "recovery", "procedure", "data", "resilience"],
        clause_numbers=["A.5.12", "A.5.31", "A.5.13"],
    ),
    dict(
        title="Training and Awareness Records",
        description="Evidence of security training",
        clause_ref="7.2, A.6.3",
        importance="Demonstrates staff have necessary security awareness and competence",
        keywords=["training", "awareness", "records", "security", "competence"],
        clause_numbers=["7.2", "A.6.3", "7.2.1"],
        document_type=DocumentType.RECORD,
        can_be_fulfilled_by=["Training Records / Competency Matrix"],
        fulfills=["Training Records / Competency Matrix"],
    ),
    dict(
        title="Internal Audit Reports",
        description="Evidence of ISMS auditing",
        clause_ref="9.2",
        importance="Shows systematic evaluation of ISMS effectiveness",
        keywords=["internal", "audit", "reports", "isms", "evaluation"],
        clause_numbers=["9.2", "9.2.1", "9.2.2"],
    ),
    dict(
        title="Management Review Minutes",
        description="Top management reviews of ISMS",
        clause_ref="9.3",
        importance="Demonstrates leadership involvement in ISMS governance",
        keywords=["management", "review", "minutes", "isms", "leadership"],
        clause_numbers=["9.3", "9.3.1", "9.3.2", "9.3.3"],
    ),
    dict(
        title="Nonconformity and Corrective Action Log",
        description="Tracks and resolves ISMS issues",
        clause_ref="10.1",
        importance="Ensures systematic resolution of security issues",
        keywords=["nonconformity", "corrective", "action", "log", "issues"],
        clause_numbers=["10.1", "10.2", "10.2.1"],
    ),
    dict(
        title="Supplier Security Policy",
        category="Optional",
        description="Ensures supplier risk is managed",
        clause_ref="A.5.19",
        importance="Controls security risks from third-party suppliers",
        keywords=["supplier", "security", "policy", "third-party", "vendor"],
        clause_numbers=["A.5.19", "A.5.20", "A.5.21"],
    ),
    dict(
        title="Acceptable Use Policy",
        category="Optional",
        description="Defines user responsibilities",
        clause_ref="A.5.10, A.5.13",
        importance="Sets clear expectations for acceptable use of IT resources",
        keywords=["acceptable", "use", "policy", "user", "responsibilities"],
        clause_numbers=["A.5.10", "A.5.13", "A.6.2"],
    ),
    dict(
        title="Threat Intelligence Log",
        category="Optional",
        description="Tracks relevant security threats",
        clause_ref="A.5.7",
        importance="Maintains awareness of evolving threat landscape",
        keywords=["threat", "intelligence", "log", "security", "landscape"],
        clause_numbers=["A.5.7", "A.5.8"],
    ),
    dict(
        title="Audit Schedule",
        category="Optional",
        description="Useful for planning recurring audits",
        importance="Ensures systematic coverage of all ISMS areas",
        keywords=["audit", "schedule", "planning", "recurring", "coverage"],
    ),
    dict(
        title="Mobile Device Policy",
        category="Optional",
        description="Covers risks of mobile working",
        clause_ref="A.5.10, A.5.13",
        importance="Addresses security risks from mobile and remote working",
        keywords=["mobile", "device", "policy", "remote", "working"],
        clause_numbers=["A.5.10", "A.5.13", "A.6.7"],
    ),
]


def _parent_number(clause_number: str) -> Optional[str]:
    if "." not in clause_number:
        return None
    return clause_number.rsplit(".", 1)[0]


def build_clause_records(standard: StandardType) -> List[ISOClauseRecord]:
    """Clause tree of a standard in parent-before-child order"""
    records: List[ISOClauseRecord] = []

    def add(number: str, title: str, parent: Optional[str]):
        records.append(ISOClauseRecord(
            standard=standard,
            clause_number=number,
            title=title,
            parent_number=parent,
            keywords=tuple(ISO_CLAUSE_KEYWORDS.get(number, ())),
            id=f"{standard.value}:{number}",
        ))

    tree = ISO_9001_2015_CLAUSES if standard == StandardType.ISO_9001_2015 else ISO_27001_2022_CLAUSES
    for number, data in tree.items():
        add(number, data["title"], None)
        known = {number}
        for sub_number, sub_title in data["subclauses"].items():
            parent = _parent_number(sub_number)
            add(sub_number, sub_title, parent if parent in known else number)
            known.add(sub_number)

    if standard == StandardType.ISO_27001_2022:
        for number, data in ISO_27001_2022_ANNEX_A.items():
            add(number, data["title"], None)
            for control_number, control_title in data["controls"].items():
                add(control_number, control_title, number)

    return records


def build_requirements(standard: StandardType) -> List[StandardRequirement]:
    """Required-document catalog of a standard, in catalog order"""
    documents = ISO_9001_DOCUMENTS if standard == StandardType.ISO_9001_2015 else ISO_27001_DOCUMENTS
    return [_requirement(standard, i, **fields) for i, fields in enumerate(documents, start=1)]


class StaticCatalog(RequirementCatalog, ClauseCatalog):
    """In-memory requirement and clause catalog built from the tables above"""

    def __init__(self):
        self._requirements = {standard: build_requirements(standard) for standard in StandardType}
        self._clauses = {standard: build_clause_records(standard) for standard in StandardType}

    def list_requirements(self, standard: Optional[StandardType] = None) -> List[StandardRequirement]:
        if standard is not None:
            return list(self._requirements[standard])
        return [req for standard in StandardType for req in self._requirements[standard]]

    def list_clauses(self, standard: StandardType) -> List[ISOClauseRecord]:
        return list(self._clauses[standard])

    def get_clause(self, standard: StandardType, clause_number: str) -> Optional[ISOClauseRecord]:
        for clause in self._clauses[standard]:
            if clause.clause_number == clause_number:
                return clause
        return None
