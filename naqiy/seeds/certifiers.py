"""
Sample certifying bodies and their controversy timeline.

Practice flags are raw disclosures; scores are never seeded, the
materializer computes them.
"""

from __future__ import annotations

from naqiy.controversy import ControversyEvent
from naqiy.trust_score import CertifierIndicators, CertifyingBodyProfile


def _profile(id, name, website, creation_year, halal_assessment, notes=None, **flags):
    return CertifyingBodyProfile(
        id=id,
        name=name,
        website=website,
        creation_year=creation_year,
        indicators=CertifierIndicators.from_mapping(flags),
        halal_assessment=halal_assessment,
        notes=notes,
    )


CERTIFIERS: list[CertifyingBodyProfile] = [
    _profile(
        "avs-a-votre-service", "AVS (A Votre Service)", "https://www.avs.fr", 1991, True,
        controllers_are_employees=True,
        controllers_present_each_production=True,
        has_salaried_slaughterers=True,
        accepts_mechanical_slaughter=False,
        accepts_electronarcosis=False,
        accepts_post_slaughter_electrocution=False,
        accepts_stunning=False,
        accepts_vsm=False,
        transparency_public_charter=True,
        transparency_audit_reports=False,
        transparency_company_list=True,
    ),
    _profile(
        "argml-mosquee-de-lyon", "ARGML (Mosquée de Lyon)", "https://www.mosquee-lyon.org", 1995, True,
        controllers_are_employees=True,
        controllers_present_each_production=True,
        has_salaried_slaughterers=True,
        accepts_mechanical_slaughter=False,
        accepts_electronarcosis=False,
        accepts_post_slaughter_electrocution=False,
        accepts_stunning=False,
        accepts_vsm=None,
        transparency_public_charter=True,
        transparency_audit_reports=None,
        transparency_company_list=True,
    ),
    _profile(
        "achahada", "Achahada", "https://www.achahada.fr", 2007, True,
        controllers_are_employees=True,
        controllers_present_each_production=True,
        has_salaried_slaughterers=None,
        accepts_mechanical_slaughter=False,
        accepts_electronarcosis=False,
        accepts_post_slaughter_electrocution=False,
        accepts_stunning=False,
        accepts_vsm=False,
        transparency_public_charter=True,
        transparency_audit_reports=None,
        transparency_company_list=None,
    ),
    _profile(
        "sfcvh-mosquee-de-paris", "SFCVH (Mosquée de Paris)", None, 1994, False,
        notes="Separated from the Grande Mosquée de Paris in 2022.",
        controllers_are_employees=False,
        controllers_present_each_production=False,
        has_salaried_slaughterers=None,
        accepts_mechanical_slaughter=True,
        accepts_electronarcosis=True,
        accepts_post_slaughter_electrocution=True,
        accepts_stunning=True,
        accepts_vsm=True,
        transparency_public_charter=False,
        transparency_audit_reports=False,
        transparency_company_list=False,
    ),
    _profile(
        "afcai", "AFCAI", None, 2001, False,
        controllers_are_employees=None,
        controllers_present_each_production=False,
        has_salaried_slaughterers=False,
        accepts_mechanical_slaughter=True,
        accepts_electronarcosis=True,
        accepts_post_slaughter_electrocution=None,
        accepts_stunning=True,
        accepts_vsm=None,
        transparency_public_charter=None,
        transparency_audit_reports=False,
        transparency_company_list=None,
    ),
]


EVENTS: list[ControversyEvent] = [
    ControversyEvent(
        id="avs-isla-delice-2010",
        certifier_id="avs-a-votre-service",
        event_type="controversy",
        severity="major",
        title="Mechanically separated meat found in certified cold cuts",
        source_name="Al-Kanz",
        source_url="https://www.al-kanz.org/2013/01/avs-isla-delice/",
        occurred_at="2010-06-01",
        resolved_at="2012-12-31",
        resolution_status="resolved",
        score_impact=0,
        is_active=False,
    ),
    ControversyEvent(
        id="avs-meaux-2025",
        certifier_id="avs-a-votre-service",
        event_type="improvement",
        severity="positive",
        title="Certification of the Meaux abattoir suspended after animal-welfare findings",
        source_name="L214",
        occurred_at="2025-05-15",
        resolution_status="ongoing",
        score_impact=0,
        is_active=True,
    ),
    ControversyEvent(
        id="sfcvh-herta-2011",
        certifier_id="sfcvh-mosquee-de-paris",
        event_type="controversy",
        severity="critical",
        title="Pork DNA traces reported in certified sausages",
        source_name="Al-Kanz",
        source_url="https://www.al-kanz.org/2011/01/25/herta-halal-analyses",
        occurred_at="2011-01-25",
        resolved_at="2012-06-30",
        resolution_status="partially_resolved",
        score_impact=-10,
        is_active=True,
    ),
    ControversyEvent(
        id="sfcvh-no-field-controllers-2015",
        certifier_id="sfcvh-mosquee-de-paris",
        event_type="controversy",
        severity="major",
        title="Export monopoly run without field controllers",
        source_name="L'Opinion / Al-Kanz",
        source_url="https://www.al-kanz.org/2016/03/18/mosquee-paris-sfcvh/",
        occurred_at="2015-03-01",
        resolution_status="ongoing",
        score_impact=-5,
        is_active=True,
    ),
    ControversyEvent(
        id="sfcvh-gmp-separation-2022",
        certifier_id="sfcvh-mosquee-de-paris",
        event_type="separation",
        severity="major",
        title="Grande Mosquée de Paris ends its partnership",
        source_name="Grande Mosquée de Paris",
        occurred_at="2022-06-15",
        resolution_status="ongoing",
        score_impact=0,
        is_active=True,
    ),
    ControversyEvent(
        id="argml-brd-2021",
        certifier_id="argml-mosquee-de-lyon",
        event_type="improvement",
        severity="positive",
        title="Dropped a major client rather than accept EU electronarcosis settings",
        source_name="Al-Kanz",
        occurred_at="2021-12-01",
        resolved_at="2021-12-31",
        resolution_status="resolved",
        score_impact=0,
        is_active=True,
    ),
    ControversyEvent(
        id="afcai-mechanical-2010",
        certifier_id="afcai",
        event_type="controversy",
        severity="major",
        title="Certifies mechanical slaughter without permanent line control",
        source_name="Al-Kanz",
        occurred_at="2010-01-01",
        resolution_status="ongoing",
        score_impact=-5,
        is_active=True,
    ),
]
