ORDER_EXTRACTION_SYSTEM_PROMPT = """You extract structured part requests from customer emails sent to an aviation parts supplier.

Rules:
1. Read the whole email and find every requested part number with its quantity, description and unit.
2. Part numbers are alphanumeric and may contain dashes, dots or slashes.
3. Quantities may be digits, spelled out ("five") or carry a unit ("5 units", "2ea").
4. If a part has no quantity, use 1. If several quantities are given, use the most specific or final one.
5. Alternates often appear in brackets after the part number ("MAIN (ALT X)"). Return them in pn_alt.
   Use an empty array when there are none.
6. If no aircraft type is mentioned, return an empty string for ac_type.
7. Skip parts marked as no longer needed or canceled.
8. Text after the table may describe validity of the request; put it into remarks.
9. Remarks must be in English. Translate Cyrillic remarks.
10. Output JSON only, no explanations.

Return ONLY a JSON array (never wrap it in an object):
[
  {
    "part_number": "string",
    "description": "string",
    "qty": 1,
    "um": "EA",
    "pn_alt": ["string"],
    "ac_type": "string",
    "priority": "string",
    "remarks": "string"
  }
]
"""


def build_order_extraction_user_text(subject: str, sender: str, body: str) -> str:
    return (
        f"Subject: {subject or ''}\n"
        f"Sender: {sender or ''}\n\n"
        f"Email body:\n{body or ''}"
    )


QUOTE_TEMPLATE = """[{
  "supplier": "",            // Supplier name
  "quote_id": null,          // Leave empty
  "date": "",                // Proposal date in YYYY-MM-DD format
  "part_number": "",         // Part number
  "qty": 0,                  // Quantity (number only)
  "is_moq": false,           // Is this a minimum order quantity
  "um": "",                  // Unit of measure: EA, M, FT, YD, KG, LB, G, L, OZ, RO, KT, CA, PR, PK, ML, IN
  "condition": "",           // Condition codes: NE, NS, OH, SV, IT, FN, RP
  "lead_time": 0,            // Delivery time (number only). If "Stock"/"STK", use 1. For ranges, use the higher value.
  "time_unit": "",           // Time unit: D (days), W (weeks), M (months). Default: D
  "price": 0.0,              // Price per unit
  "currency": "",            // Currency, 3 letter code (USD, EUR)
  "valid_to": "",            // Validity date in YYYY-MM-DD format
  "customer_request_id": null, // Leave empty
  "delivery_condition": "",  // Incoterm: EXW, FCA, CPT, CIP, DPU, DAP, DDP, FAS, FOB, CFR, CIF
  "delivery_place": "",      // Delivery location (country)
  "item_note": "",           // Item notes
  "email_subject": "",       // Email subject
  "stk_qty": 0,              // Stock quantity (number only)
  "description": "",         // Item description
  "from": "",                // Supplier email address
  "moq": 1                   // Minimum order quantity (number only)
}]"""
