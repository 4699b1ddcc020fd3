"""Prompt text and the metadata blocks embedded in it."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from investmap.domain.model import Candidate, Investment

CLASSIFY_SYSTEM = (
    "You are an expert in Greek administrative documents, particularly those related to "
    "strategic investments and incentives. You can identify when a document is a revision "
    "or amendment of an earlier decision."
)

EXTRACT_DECISION_SYSTEM = (
    "You are an expert in Greek administrative documents, particularly those related to "
    "strategic investments and incentives. Your primary task is to extract accurate "
    "information, with special attention to financial data like the total investment "
    "amount. Search thoroughly throughout the document for these details, as they're "
    "critical for analysis. Analyze all sections of the document where financial "
    "information might appear."
)

EXTRACT_PAGE_SYSTEM = (
    "You are an expert in Greek strategic investments and government data. Your task is "
    "to extract structured information from HTML content of investment websites."
)

ARBITRATE_SYSTEM = (
    "You are an expert at identifying duplicate investments in different data sources. "
    "Your task is to determine if a ministry website investment is the same as any "
    "investment from the Diavgeia database."
)

_CLASSIFY_TEMPLATE = """\
I need to identify decisions that are specifically about "Έγκριση χορήγησης κινήτρων" \
(Approval of Incentives) for strategic investments. Please analyze the following list of \
document metadata from Diavgeia, and return ONLY the ADA codes (in an array format) for \
documents that are likely about approving incentives for strategic investments.

IMPORTANT: If there are multiple versions of the same decision (indicated by subjects \
containing words like {keywords}), ONLY include the most recent version and exclude the \
older version(s) that have been revised or amended. This is to prevent double-counting \
the same investment.

{metadata}

Return your answer as a valid JSON array containing only the ADA codes of relevant \
documents, like this: ["ADA1", "ADA2"]"""

_FIELDS_COMMON = """\
1. Date approved (dateApproved): Date in YYYY-MM-DD format
2. Beneficiary company (beneficiary): Full name of the company
3. Name of the investment project (name): Full project name

4. Total amount in euros (totalAmount): Number with no formatting
   - CRITICAL: The total amount is one of the most important pieces of information
   - Look for phrases like "συνολικό κόστος", "συνολικό ποσό επένδυσης", "προϋπολογισμός επένδυσης"
   - Ensure you extract just the number with no currency symbols or formatting
   - This should be the total cost of the investment, not funding amounts or incentives
   - If you find multiple amounts, choose the one explicitly labeled as the total investment amount
"""

_FIELDS_REST = """\
6. Amount breakdown (amountBreakdown): List of {amount: number, description: string}
   - This should capture how the money will be spent (NOT the funding sources)
   - Only include the first-level breakdown categories
   - The amounts should add up to the total amount
   - Example: [{amount: 10000000, description: "Construction costs"}, {amount: 5000000, description: "Equipment"}]

7. Locations (locations): List of {description: string, textLocation: string}
   - List each location where the investment will be built/established
   - 'description' should describe what will be built in that location (e.g., "hotel", "factory", "marina")
   - 'textLocation' should contain the address or verbal description of the place
   - Format textLocation to help geocoding: include city, municipality or region names, \
postal codes if available, and standard place names without abbreviations
   - Format: "Street Name Number, City, Region, Postal Code, Greece"

8. Funding source (fundingSource): List of {source: string, perc?: number, amount?: number}
   - This should list how the project will be funded
   - 'source' is the name of the funding source (e.g., "Ίδια κεφάλαια", "Τραπεζικός δανεισμός")
   - 'perc' is the share of total funding (e.g., 0.7 for 70%) if specified
   - 'amount' is the absolute amount if specified instead of a percentage
   - If both percentage and amount are specified, prioritize using percentage

9. Incentives approved (incentivesApproved): List of {name: string, incentiveType?: string}
   - List all incentives that were approved in the document
   - Classify each incentive according to these predefined types:
     * FAST_TRACK_LICENSING: For fast-track or expedited licensing procedures
     * SPECIAL_ZONING: For special zoning arrangements or location incentives
     * TAX_RATE_FREEZE: For freezing tax rates for a period
     * TAX_EXEMPTION: For tax exemptions or reductions
     * ACCELERATED_DEPRECIATION: For accelerated depreciation allowances
     * INVESTMENT_GRANT: For direct grants or subsidies on the investment
     * LEASING_SUBSIDY: For leasing subsidies
     * EMPLOYMENT_COST_SUBSIDY: For subsidies related to employment costs
     * AUDITOR_MONITORING: For auditor monitoring benefits
     * SHORELINE_USE: For shoreline use rights
     * EXPROPRIATION_SUPPORT: For support with expropriation procedures
   - A single incentive can only have one type
   - If the incentive doesn't clearly match any type, omit the incentiveType field

10. Category (category): One of the following strings that best describes the investment's sector:
   - PRODUCTION_MANUFACTURING: production facilities, factories, manufacturing, processing, \
construction, energy production (Παραγωγή & Μεταποίηση)
   - TECHNOLOGY_INNOVATION: technology companies, R&D centers, software, telecommunications, \
digital services (Τεχνολογία & Καινοτομία)
   - TOURISM_CULTURE: hotels, resorts, tourism facilities, cultural venues, heritage sites \
(Τουρισμός & Πολιτισμός)
   - SERVICES_EDUCATION: service sector, educational institutions, training centers, business \
services (Υπηρεσίες & Εκπαίδευση)
   - HEALTHCARE_WELFARE: hospitals, clinics, care facilities, social welfare projects \
(Υγεία & Κοινωνική Μέριμνα)
   - You MUST select EXACTLY ONE category that best matches the investment
"""

_DECISION_TEMPLATE = """\
Please analyze this strategic investment incentive approval document and extract the \
following data in the exact format specified:

Document Context:
{context}

Extract these fields:
{common}
5. References (reference):
   - Government Gazette reference (fek): Exact FEK reference in the format \
"ΦΕΚ [SERIES]/[NUMBER]/[DATE]" (e.g., "ΦΕΚ Β' 123/15.07.2023")
   - Diavgeia ADA (diavgeiaADA): The ADA code

{rest}
IMPORTANT:
- Make your best effort to find ALL requested information, especially the total amount
- If information is unclear or appears in multiple places, choose the most authoritative occurrence
- Return ONLY the exact data structure specified with no additional text or explanations
- Do not leave the total amount as 0 unless you are absolutely certain it's not mentioned \
anywhere in the document"""

_PAGE_TEMPLATE = """\
Please analyze this strategic investment webpage content and extract the following data \
in the exact format specified:

URL Context:
{url}

HTML Content (truncated for brevity):
{html}

Extract these fields:
{common}
5. References (reference):
   - Government Gazette reference (fek): Exact FEK reference in the format \
"ΦΕΚ [SERIES]/[NUMBER]/[DATE]" (e.g., "ΦΕΚ Β' 123/15.07.2023")

{rest}
I've already attempted to extract the following, please use this as a starting point and \
correct/enhance it:
{hint}

IMPORTANT:
- Make your best effort to find ALL requested information
- If information is unclear or appears in multiple places, choose the most authoritative occurrence
- Return ONLY the exact data structure specified with no additional text or explanations"""

_ARBITRATE_TEMPLATE = """\
I need to identify if this investment from the ministry website is a duplicate of any \
investment from the Diavgeia database.

Ministry Website Investment:
{candidate}

Potential Matching Investments from Diavgeia:
{shortlist}

Analyze these investments and determine:
1. Is the ministry investment a duplicate of any of the Diavgeia investments?
2. If yes, which one? (provide the ADA code)
3. How confident are you in this match? (high, medium, low)

Return your answer as a JSON object with this structure:
{{
  "isDuplicate": true/false,
  "matchedADA": "ADA code if duplicate, empty string if not",
  "confidence": "high/medium/low",
  "explanation": "Brief explanation of your reasoning"
}}

Important considerations:
- Matching names and beneficiaries might have slight variations in spelling or formatting
- Location information is critical - investments in completely different locations are not duplicates
- Total amounts should be reasonably close for duplicates (within ~10-20%)
- If FEK references match, it's a strong indicator of a duplicate"""


def _dump(value: object) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def candidate_metadata(candidate: Candidate) -> dict[str, object]:
    metadata: dict[str, object] = {
        "ada": candidate.code,
        "subject": candidate.subject,
        "protocolNumber": candidate.protocol_number,
        "url": candidate.document_url,
        "organization": candidate.organization or "Unknown",
        "issueDate": candidate.issue_date or "",
        "correctedVersionId": candidate.corrected_version_id,
        "revisesADA": candidate.revises_code,
    }
    if candidate.related_decisions:
        metadata["relatedDecisions"] = list(candidate.related_decisions)
    return metadata


def _locations(record: Investment) -> list[dict[str, object]]:
    locations: list[dict[str, object]] = []
    for location in record.locations:
        entry: dict[str, object] = {"description": location.description}
        if location.text_location:
            entry["textLocation"] = location.text_location
        locations.append(entry)
    return locations


def record_summary(record: Investment) -> dict[str, object]:
    """The fields duplicate arbitration looks at."""

    return {
        "name": record.name,
        "beneficiary": record.beneficiary,
        "totalAmount": record.total_amount,
        "locations": _locations(record),
        "ada": record.registry_code or "",
        "url": record.source_url or "",
        "fek": record.reference.gazette or "",
    }


def hint_summary(hint: Investment) -> dict[str, object]:
    summary: dict[str, object] = {}
    if hint.name:
        summary["name"] = hint.name
    if hint.beneficiary:
        summary["beneficiary"] = hint.beneficiary
    if hint.total_amount:
        summary["totalAmount"] = hint.total_amount
    if hint.locations:
        summary["locations"] = _locations(hint)
    reference = {
        key: value
        for key, value in (("ministryUrl", hint.source_url), ("fek", hint.reference.gazette))
        if value
    }
    if reference:
        summary["reference"] = reference
    return summary


def classification_prompt(candidates: Sequence[Candidate], keywords: Sequence[str]) -> str:
    return _CLASSIFY_TEMPLATE.format(
        keywords=", ".join(f'"{keyword}"' for keyword in keywords),
        metadata=_dump([candidate_metadata(candidate) for candidate in candidates]),
    )


def decision_extraction_prompt(candidate: Candidate) -> str:
    context = {
        "ada": candidate.code,
        "documentUrl": candidate.document_url,
        "subject": candidate.subject,
        "protocolNumber": candidate.protocol_number,
        "organization": candidate.organization or "Unknown",
        "issueDate": candidate.issue_date,
        "decisionType": candidate.decision_type or "Unknown",
        "correctedVersionId": candidate.corrected_version_id,
        "revisesADA": candidate.revises_code,
    }
    return _DECISION_TEMPLATE.format(
        context=_dump(context), common=_FIELDS_COMMON, rest=_FIELDS_REST
    )


def page_extraction_prompt(candidate: Candidate, *, content_limit: int) -> str:
    hint = hint_summary(candidate.hint) if candidate.hint is not None else {}
    return _PAGE_TEMPLATE.format(
        url=candidate.document_url or "",
        html=(candidate.page_content or "")[:content_limit],
        common=_FIELDS_COMMON,
        rest=_FIELDS_REST,
        hint=_dump(hint),
    )


def arbitration_prompt(candidate: Investment, shortlist: Sequence[Investment]) -> str:
    summary = record_summary(candidate)
    summary.pop("ada")
    matches = [record_summary(record) for record in shortlist]
    for match in matches:
        match.pop("url")
    return _ARBITRATE_TEMPLATE.format(candidate=_dump(summary), shortlist=_dump(matches))
