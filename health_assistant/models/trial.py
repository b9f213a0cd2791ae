from __future__ import annotations

from pydantic import BaseModel, Field


def study_title(study: dict) -> str:
    """Return a display title for a raw ClinicalTrials.gov study record."""
    ident = (study.get("protocolSection") or {}).get("identificationModule") or {}
    return (
        ident.get("briefTitle")
        or ident.get("officialTitle")
        or ident.get("nctId")
        or "Untitled study"
    )


class TrialSummary(BaseModel):
    nct_id: str = ""
    brief_title: str = ""
    overall_status: str = ""
    conditions: list[str] = Field(default_factory=list)
    countries: list[str] = Field(default_factory=list)

    @classmethod
    def from_study(cls, study: dict) -> TrialSummary:
        """Flatten the parts of a study record we show to the user."""
        protocol = study.get("protocolSection") or {}
        ident = protocol.get("identificationModule") or {}
        status_mod = protocol.get("statusModule") or {}
        conditions = protocol.get("conditionsModule") or {}
        locations = (protocol.get("contactsLocationsModule") or {}).get("locations") or []

        countries: list[str] = []
        for loc in locations:
            country = loc.get("country")
            if country and country not in countries:
                countries.append(country)

        return cls(
            nct_id=ident.get("nctId") or "",
            brief_title=study_title(study),
            overall_status=status_mod.get("overallStatus") or "",
            conditions=conditions.get("conditions") or [],
            countries=countries,
        )
