"""
NYC property tax rates by tax class and fiscal year.

Source: NYC Department of Finance. Rates are percentages (19.843 = 19.843%).
"""

# Date used to determine property assessments for the fiscal year ("Month Day")
NYC_TAXABLE_STATUS_DATE = "January 5"

NYC_TAX_RATES = [
    {"year": "2025/26", "fiscal_year": 2026, "class1": 19.843, "class2": 12.439, "class3": 11.108, "class4": 10.848},
    {"year": "2024/25", "fiscal_year": 2025, "class1": 20.085, "class2": 12.500, "class3": 11.181, "class4": 10.762},
    {"year": "2023/24", "fiscal_year": 2024, "class1": 20.085, "class2": 12.502, "class3": 12.094, "class4": 10.592},
    {"year": "2022/23", "fiscal_year": 2023, "class1": 20.309, "class2": 12.267, "class3": 12.755, "class4": 10.646},
    {"year": "2021/22", "fiscal_year": 2022, "class1": 19.963, "class2": 12.235, "class3": 12.289, "class4": 10.755},
    {"year": "2020/21", "fiscal_year": 2021, "class1": 21.045, "class2": 12.267, "class3": 12.826, "class4": 10.694},
    {"year": "2019/20", "fiscal_year": 2020, "class1": 21.167, "class2": 12.473, "class3": 12.536, "class4": 10.537},
]
