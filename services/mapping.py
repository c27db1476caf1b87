from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from models import EmployeeRecord, LookupProfile
from services.domain_utils import profile_key
from utils.number_parsing import parse_flag, parse_float, parse_int


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _dump(items: List[Any]) -> str:
    return json.dumps(items, ensure_ascii=False)


def row_to_employee(row: Dict[str, Any]) -> EmployeeRecord:
    """Normalize one import-file row (CSV column names) into an EmployeeRecord."""
    company = _text(row.get('CurrentCompany'))
    return EmployeeRecord(
        name=_text(row.get('Name')),
        linkedin_url=profile_key(row.get('LinkedInURL')),
        title=_text(row.get('Title')),
        current_company=company,
        location=_text(row.get('Location')),
        city=_text(row.get('City')),
        region=_text(row.get('Region')),
        country=_text(row.get('Country')),
        country_code=_text(row.get('CountryCode')),
        region_latitude=parse_float(row.get('RegionLatitude')),
        region_longitude=parse_float(row.get('RegionLongitude')),
        phone_numbers=_text(row.get('PhoneNumbers')),
        emails=_text(row.get('Emails')),
        personal_emails=_text(row.get('PersonalEmails')),
        professional_emails=_text(row.get('ProfessionalEmails')),
        birth_year=parse_int(row.get('BirthYear')),
        current_employer_website=_text(row.get('CurrentEmployerWebsite')),
        current_employer_domain=_text(row.get('CurrentEmployerDomain')),
        current_employer_id=parse_int(row.get('CurrentEmployerId')),
        current_employer_linkedin_url=_text(row.get('CurrentEmployerLinkedInURL')),
        profile_picture_url=_text(row.get('ProfilePictureURL')),
        status=_text(row.get('Status')),
        suppressed=parse_flag(row.get('Suppressed')),
        category=_text(row.get('Category')),
    )


def _joined(values: Any, key: Optional[str] = None) -> str:
    if not isinstance(values, list):
        return ''
    out = []
    for v in values:
        if isinstance(v, dict):
            v = v.get(key) if key else None
        if v:
            out.append(str(v))
    return ', '.join(out)


def search_profile_to_row(profile: Dict[str, Any], company_name: str) -> Dict[str, Any]:
    """Map a people-search result into the import-row shape.

    The searched company name is kept as CurrentCompany so every result of one
    search resolves to the same company row.
    """
    return {
        'Name': profile.get('name') or '',
        'LinkedInURL': profile.get('linkedin_url') or '',
        'CurrentCompany': company_name,
        'Title': profile.get('current_title') or '',
        'Location': profile.get('location') or '',
        'City': profile.get('city') or '',
        'Region': profile.get('region') or '',
        'Country': profile.get('country') or '',
        'CountryCode': profile.get('country_code') or '',
        'PhoneNumbers': _joined(profile.get('phones'), 'number'),
        'Emails': _joined(profile.get('emails'), 'email'),
        'PersonalEmails': _joined(profile.get('personal_emails'), 'email'),
        'ProfessionalEmails': _joined(profile.get('professional_emails'), 'email'),
        'BirthYear': profile.get('birth_year'),
        'CurrentEmployerWebsite': profile.get('current_employer_website') or '',
        'CurrentEmployerDomain': profile.get('current_employer_domain') or '',
        'CurrentEmployerId': profile.get('current_employer_id'),
        'CurrentEmployerLinkedInURL': profile.get('current_employer_linkedin_url') or '',
        'ProfilePictureURL': profile.get('profile_pic') or '',
        'RegionLatitude': profile.get('region_latitude'),
        'RegionLongitude': profile.get('region_longitude'),
        'Status': profile.get('status') or '',
        'Suppressed': 'true' if profile.get('suppressed') else 'false',
        'Category': '',
    }


def lookup_query(record: EmployeeRecord) -> Dict[str, str]:
    """Identity fields for a person lookup; empty or absent fields are dropped."""
    payload = {
        'name': record.name,
        'current_employer': _text(record.current_company) or _text(record.current_employer),
        'linkedin_url': record.linkedin_url,
    }
    return {k: str(v).strip() for k, v in payload.items() if v is not None and str(v).strip()}


def _typed_emails(emails: List[Any], kind: str) -> List[str]:
    return [
        e['email'] for e in emails
        if isinstance(e, dict) and e.get('email') and str(e.get('type') or '').lower() == kind
    ]


def profile_to_enrichment_fields(profile: LookupProfile) -> Dict[str, Any]:
    """Map a completed service profile into EmployeeRecord fields.

    Lists are stored as JSON text. Scalar fields the service left empty are
    omitted so they do not blank out what the record already holds.
    """
    fields: Dict[str, Any] = {
        'education': _dump(profile.education),
        'job_history': _dump(profile.job_history),
        'skills': _dump(profile.skills),
        'emails': _dump(profile.emails),
        'phone_numbers': _dump(profile.phones),
        'is_enriched': True,
    }
    personal = _typed_emails(profile.emails, 'personal')
    professional = _typed_emails(profile.emails, 'professional')
    if personal:
        fields['personal_emails'] = ', '.join(personal)
    if professional:
        fields['professional_emails'] = ', '.join(professional)

    scalars = {
        'title': profile.current_title,
        'current_employer': profile.current_employer,
        'current_employer_website': profile.current_employer_website,
        'current_employer_domain': profile.current_employer_domain,
        'current_employer_id': profile.current_employer_id,
        'current_employer_linkedin_url': profile.current_employer_linkedin_url,
        'profile_picture_url': profile.profile_pic,
        'location': profile.location,
        'city': profile.city,
        'region': profile.region,
        'country': profile.country,
        'country_code': profile.country_code,
        'region_latitude': profile.region_latitude,
        'region_longitude': profile.region_longitude,
        'birth_year': profile.birth_year,
        'suppressed': profile.suppressed,
    }
    for key, value in scalars.items():
        if value is not None and value != '':
            fields[key] = value
    return fields


def job_history_entries(job_history: Any) -> List[Dict[str, Any]]:
    """Prior-employment rows from a job-history list (or its JSON text)."""
    if isinstance(job_history, str):
        try:
            job_history = json.loads(job_history)
        except ValueError:
            return []
    if not isinstance(job_history, list):
        return []
    entries = []
    for job in job_history:
        if not isinstance(job, dict):
            continue
        company = _text(job.get('company_name') or job.get('company'))
        if not company:
            continue
        entries.append({
            'company_name': company,
            'title': _text(job.get('title')),
            'start_date': _text(job.get('start_date')),
            'end_date': _text(job.get('end_date')),
            'is_current': bool(job.get('is_current')),
        })
    return entries
