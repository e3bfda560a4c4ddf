"""Legal-aid referrals matched to the user's language.

The seed directory is demo data (example.org sites, 555 numbers); real
deployments load their own contacts into legal_aid_contacts.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from docbridge import db
from docbridge.models import LegalAidContact

LANGUAGE_MATCH_SCORE = 3
INTERPRETER_SCORE = 1
SPECIALTY_SCORE = 2
REGION_SCORE = 1

DEFAULT_CONTACTS: List[Dict[str, Any]] = [
    {
        "name": "Community Legal Aid Center",
        "organization": "Community Legal Aid Center (demo)",
        "phone": "+1-555-0100",
        "email": "intake@legalaid.example.org",
        "website": "https://legalaid.example.org",
        "region": "National",
        "languages": ["English", "Spanish", "Haitian Creole"],
        "specialties": ["legal", "housing", "civic"],
        "interpreter_available": True,
    },
    {
        "name": "Tenant Rights Hotline",
        "organization": "Fair Housing Network (demo)",
        "phone": "+1-555-0111",
        "email": "help@tenants.example.org",
        "website": "https://tenants.example.org",
        "region": "National",
        "languages": ["English", "Spanish", "Mandarin", "Vietnamese"],
        "specialties": ["housing"],
        "interpreter_available": False,
    },
    {
        "name": "Immigrant Justice Clinic",
        "organization": "New Arrivals Legal Services (demo)",
        "phone": "+1-555-0122",
        "email": "clinic@newarrivals.example.org",
        "website": "https://newarrivals.example.org",
        "region": "National",
        "languages": ["English", "Arabic", "Dari", "Pashto", "Persian", "Ukrainian"],
        "specialties": ["civic", "legal"],
        "interpreter_available": True,
    },
    {
        "name": "South Asian Legal Help Desk",
        "organization": "Desi Community Services (demo)",
        "phone": "+1-555-0133",
        "email": "legal@desi.example.org",
        "website": "https://desi.example.org",
        "region": "Northeast",
        "languages": ["English", "Hindi", "Urdu", "Bengali", "Punjabi", "Nepali"],
        "specialties": ["legal", "civic", "housing"],
        "interpreter_available": False,
    },
    {
        "name": "Patient Advocacy Project",
        "organization": "Health Access Alliance (demo)",
        "phone": "+1-555-0144",
        "email": "advocates@healthaccess.example.org",
        "website": "https://healthaccess.example.org",
        "region": "West",
        "languages": ["English", "Spanish", "Tagalog", "Korean"],
        "specialties": ["healthcare"],
        "interpreter_available": True,
    },
    {
        "name": "East African Community Legal Line",
        "organization": "Horn of Africa Services (demo)",
        "phone": "+1-555-0155",
        "email": "info@hoas.example.org",
        "website": "https://hoas.example.org",
        "region": "Midwest",
        "languages": ["English", "Somali", "Amharic", "Tigrinya", "Swahili"],
        "specialties": ["legal", "housing", "civic"],
        "interpreter_available": False,
    },
]


def seed_legal_aid_contacts(contacts: Optional[List[Dict[str, Any]]] = None) -> int:
    """Insert the default directory when the table is empty. Returns rows added."""
    if LegalAidContact.query.first() is not None:
        return 0
    rows = [LegalAidContact(**c) for c in (contacts or DEFAULT_CONTACTS)]
    db.session.add_all(rows)
    db.session.commit()
    return len(rows)


def score_contact(
    contact: LegalAidContact,
    language: str,
    document_type: Optional[str] = None,
    region: Optional[str] = None,
) -> int:
    """0 means the contact cannot serve someone in that language."""
    if contact.speaks(language):
        score = LANGUAGE_MATCH_SCORE
    elif contact.interpreter_available:
        score = INTERPRETER_SCORE
    else:
        return 0

    if document_type and document_type.lower() in [s.lower() for s in (contact.specialties or [])]:
        score += SPECIALTY_SCORE
    if region and (contact.region or "").lower() == region.strip().lower():
        score += REGION_SCORE
    return score


def match_contacts(
    language: str,
    document_type: Optional[str] = None,
    region: Optional[str] = None,
    limit: int = 5,
) -> List[Dict[str, Any]]:
    scored = []
    for contact in LegalAidContact.query.all():
        score = score_contact(contact, language, document_type, region)
        if score > 0:
            scored.append((score, contact))
    scored.sort(key=lambda pair: (-pair[0], pair[1].name.lower()))

    out = []
    for score, contact in scored[:max(limit, 0)]:
        item = contact.to_dict()
        item["match_score"] = score
        item["speaks_language"] = contact.speaks(language)
        out.append(item)
    return out
