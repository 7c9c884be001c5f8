# Backend/app/services/rule_summaries.py

RULE_SUMMARIES = {
    "APR-STAR-001": "Only 3, 4 and 5 star hotels can be priced without admin approval.",
    "APR-SALE-010": "The realistic hotel sale price is above the cap for the hotel's star category.",
    "APR-VOUCHER-020": "The voucher value for the hotel is above the cap for the hotel's star category.",
    "APR-MARGIN-030": "The margin after tax is below the 27% minimum.",
    "APR-FIN-040": "The gross project financing costs exceed the 50.000 € limit."
}
