from decimal import Decimal


def build_verify_prompt(expected_amount: Decimal, expected_reference: str = "") -> str:
    amount = f"R{expected_amount:.2f}"
    return (
        "Analyze this payment proof and extract the following information.\n"
        "\n"
        f"Expected payment amount: {amount}\n"
        f"Expected reference (if any): {expected_reference}\n"
        "\n"
        "Return ONLY valid JSON. No markdown. No extra text.\n"
        "Output schema:\n"
        "  {\n"
        "    \"isPaymentProof\": boolean,\n"
        "    \"detectedAmount\": number or null,\n"
        "    \"amountMatches\": boolean,\n"
        "    \"bankName\": string or null,\n"
        "    \"transactionDate\": string or null,\n"
        "    \"referenceNumber\": string or null,\n"
        "    \"referenceMatches\": boolean,\n"
        "    \"confidence\": number (0-100),\n"
        "    \"documentType\": string,\n"
        "    \"isValid\": boolean,\n"
        "    \"issues\": array of strings describing any problems found\n"
        "  }\n"
        "\n"
        "Look for:\n"
        "  - Payment confirmation screens\n"
        "  - Bank transfer receipts\n"
        "  - EFT confirmations\n"
        "  - Mobile banking screenshots\n"
        "  - Any document showing a financial transaction\n"
        "\n"
        "The document should clearly show the transaction amount, the bank or payment\n"
        "service, date and time, a reference or transaction number, and confirmation\n"
        "that the payment was successful.\n"
        "\n"
        f"Be strict about amount matching: it must be exactly {amount}.\n"
        "Confidence should be high (80-100) only if all details are clearly visible and correct.\n"
    )
