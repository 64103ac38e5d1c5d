"""
Standard chart of accounts for a jewelry retailer.

Each row is (code, name, name_local, account_type, subtype,
parent_code). Parents always appear before their children.
"""

from jewelry_ledger.models.enums import AccountSubtype as S, AccountType as T

DEFAULT_CHART = [
    # Assets
    ("1000", "Current Assets", "دارایی‌های جاری", T.ASSET, S.CURRENT_ASSET, None),
    ("1100", "Cash and Cash Equivalents", "نقد و معادل نقد", T.ASSET, S.CASH, "1000"),
    ("1110", "Petty Cash", "تنخواه", T.ASSET, S.CASH, "1100"),
    ("1120", "Bank Account - Main", "حساب بانکی - اصلی", T.ASSET, S.BANK, "1100"),
    ("1130", "Bank Account - Savings", "حساب بانکی - پس‌انداز", T.ASSET, S.BANK, "1100"),
    ("1200", "Accounts Receivable", "حساب‌های دریافتنی", T.ASSET, S.CURRENT_ASSET, "1000"),
    ("1210", "Trade Receivables", "دریافتنی تجاری", T.ASSET, S.ACCOUNTS_RECEIVABLE, "1200"),
    ("1220", "Other Receivables", "سایر دریافتنی‌ها", T.ASSET, S.CURRENT_ASSET, "1200"),
    ("1230", "Allowance for Doubtful Accounts", "ذخیره مطالبات مشکوک‌الوصول", T.ASSET, S.CURRENT_ASSET, "1200"),
    ("1300", "Inventory", "موجودی کالا", T.ASSET, S.CURRENT_ASSET, "1000"),
    ("1310", "Raw Materials - Gold", "مواد اولیه - طلا", T.ASSET, S.CURRENT_ASSET, "1300"),
    ("1320", "Raw Materials - Silver", "مواد اولیه - نقره", T.ASSET, S.CURRENT_ASSET, "1300"),
    ("1330", "Raw Materials - Gems", "مواد اولیه - سنگ‌های قیمتی", T.ASSET, S.CURRENT_ASSET, "1300"),
    ("1340", "Work in Progress", "کالای در جریان ساخت", T.ASSET, S.CURRENT_ASSET, "1300"),
    ("1350", "Finished Goods", "کالای ساخته شده", T.ASSET, S.CURRENT_ASSET, "1300"),
    ("1400", "Prepaid Expenses", "هزینه‌های پیش‌پرداخت", T.ASSET, S.CURRENT_ASSET, "1000"),
    ("1410", "Prepaid Insurance", "بیمه پیش‌پرداخت", T.ASSET, S.CURRENT_ASSET, "1400"),
    ("1420", "Prepaid Rent", "اجاره پیش‌پرداخت", T.ASSET, S.CURRENT_ASSET, "1400"),
    ("1500", "Fixed Assets", "دارایی‌های ثابت", T.ASSET, S.FIXED_ASSET, None),
    ("1510", "Equipment", "تجهیزات", T.ASSET, S.FIXED_ASSET, "1500"),
    ("1511", "Jewelry Making Equipment", "تجهیزات جواهرسازی", T.ASSET, S.FIXED_ASSET, "1510"),
    ("1512", "Office Equipment", "تجهیزات اداری", T.ASSET, S.FIXED_ASSET, "1510"),
    ("1520", "Accumulated Depreciation - Equipment", "استهلاک انباشته - تجهیزات", T.ASSET, S.FIXED_ASSET, "1500"),
    ("1530", "Furniture and Fixtures", "اثاثه و تجهیزات", T.ASSET, S.FIXED_ASSET, "1500"),
    ("1540", "Accumulated Depreciation - Furniture", "استهلاک انباشته - اثاثه", T.ASSET, S.FIXED_ASSET, "1500"),
    ("1550", "Building", "ساختمان", T.ASSET, S.FIXED_ASSET, "1500"),
    ("1560", "Accumulated Depreciation - Building", "استهلاک انباشته - ساختمان", T.ASSET, S.FIXED_ASSET, "1500"),
    # Liabilities
    ("2000", "Current Liabilities", "بدهی‌های جاری", T.LIABILITY, S.CURRENT_LIABILITY, None),
    ("2100", "Accounts Payable", "حساب‌های پرداختنی", T.LIABILITY, S.CURRENT_LIABILITY, "2000"),
    ("2110", "Trade Payables", "پرداختنی تجاری", T.LIABILITY, S.ACCOUNTS_PAYABLE, "2100"),
    ("2120", "Other Payables", "سایر پرداختنی‌ها", T.LIABILITY, S.CURRENT_LIABILITY, "2100"),
    ("2200", "Accrued Expenses", "هزینه‌های تعهدی", T.LIABILITY, S.CURRENT_LIABILITY, "2000"),
    ("2210", "Accrued Wages", "دستمزد تعهدی", T.LIABILITY, S.CURRENT_LIABILITY, "2200"),
    ("2220", "Accrued Interest", "سود تعهدی", T.LIABILITY, S.CURRENT_LIABILITY, "2200"),
    ("2300", "Tax Liabilities", "بدهی‌های مالیاتی", T.LIABILITY, S.CURRENT_LIABILITY, "2000"),
    ("2310", "Sales Tax Payable", "مالیات فروش پرداختنی", T.LIABILITY, S.CURRENT_LIABILITY, "2300"),
    ("2320", "Income Tax Payable", "مالیات درآمد پرداختنی", T.LIABILITY, S.CURRENT_LIABILITY, "2300"),
    ("2330", "VAT Payable", "مالیات بر ارزش افزوده پرداختنی", T.LIABILITY, S.CURRENT_LIABILITY, "2300"),
    ("2500", "Long-term Liabilities", "بدهی‌های بلندمدت", T.LIABILITY, S.LONG_TERM_LIABILITY, None),
    ("2510", "Long-term Loans", "وام‌های بلندمدت", T.LIABILITY, S.LONG_TERM_LIABILITY, "2500"),
    ("2520", "Mortgage Payable", "رهن پرداختنی", T.LIABILITY, S.LONG_TERM_LIABILITY, "2500"),
    # Equity
    ("3000", "Owner's Equity", "حقوق صاحبان سهام", T.EQUITY, None, None),
    ("3100", "Capital", "سرمایه", T.EQUITY, None, "3000"),
    ("3200", "Retained Earnings", "سود انباشته", T.EQUITY, None, "3000"),
    ("3300", "Current Year Earnings", "سود سال جاری", T.EQUITY, None, "3000"),
    ("3400", "Owner Drawings", "برداشت مالک", T.EQUITY, None, "3000"),
    # Revenue
    ("4000", "Revenue", "درآمد", T.REVENUE, S.OPERATING_REVENUE, None),
    ("4100", "Sales Revenue", "درآمد فروش", T.REVENUE, S.OPERATING_REVENUE, "4000"),
    ("4110", "Gold Jewelry Sales", "فروش جواهرات طلا", T.REVENUE, S.OPERATING_REVENUE, "4100"),
    ("4120", "Silver Jewelry Sales", "فروش جواهرات نقره", T.REVENUE, S.OPERATING_REVENUE, "4100"),
    ("4130", "Custom Design Sales", "فروش طراحی سفارشی", T.REVENUE, S.OPERATING_REVENUE, "4100"),
    ("4140", "Repair Services", "خدمات تعمیر", T.REVENUE, S.OPERATING_REVENUE, "4100"),
    ("4200", "Other Revenue", "سایر درآمدها", T.REVENUE, S.OTHER_REVENUE, "4000"),
    ("4210", "Interest Income", "درآمد سود", T.REVENUE, S.OTHER_REVENUE, "4200"),
    ("4220", "Rental Income", "درآمد اجاره", T.REVENUE, S.OTHER_REVENUE, "4200"),
    # Cost of goods sold
    ("5000", "Cost of Goods Sold", "بهای تمام شده کالای فروخته شده", T.EXPENSE, S.COST_OF_GOODS_SOLD, None),
    ("5100", "Material Costs", "هزینه مواد", T.EXPENSE, S.COST_OF_GOODS_SOLD, "5000"),
    ("5110", "Gold Costs", "هزینه طلا", T.EXPENSE, S.COST_OF_GOODS_SOLD, "5100"),
    ("5120", "Silver Costs", "هزینه نقره", T.EXPENSE, S.COST_OF_GOODS_SOLD, "5100"),
    ("5130", "Gem Costs", "هزینه سنگ‌های قیمتی", T.EXPENSE, S.COST_OF_GOODS_SOLD, "5100"),
    ("5200", "Direct Labor", "دستمزد مستقیم", T.EXPENSE, S.COST_OF_GOODS_SOLD, "5000"),
    ("5300", "Manufacturing Overhead", "سربار تولید", T.EXPENSE, S.COST_OF_GOODS_SOLD, "5000"),
    # Operating expenses
    ("6000", "Operating Expenses", "هزینه‌های عملیاتی", T.EXPENSE, S.OPERATING_EXPENSE, None),
    ("6100", "Selling Expenses", "هزینه‌های فروش", T.EXPENSE, S.OPERATING_EXPENSE, "6000"),
    ("6110", "Advertising", "تبلیغات", T.EXPENSE, S.OPERATING_EXPENSE, "6100"),
    ("6120", "Sales Commissions", "کمیسیون فروش", T.EXPENSE, S.OPERATING_EXPENSE, "6100"),
    ("6200", "Administrative Expenses", "هزینه‌های اداری", T.EXPENSE, S.OPERATING_EXPENSE, "6000"),
    ("6210", "Office Supplies", "لوازم اداری", T.EXPENSE, S.OPERATING_EXPENSE, "6200"),
    ("6220", "Utilities", "آب و برق و گاز", T.EXPENSE, S.OPERATING_EXPENSE, "6200"),
    ("6230", "Insurance", "بیمه", T.EXPENSE, S.OPERATING_EXPENSE, "6200"),
    ("6240", "Professional Fees", "حق‌الزحمه حرفه‌ای", T.EXPENSE, S.OPERATING_EXPENSE, "6200"),
    ("6250", "Depreciation Expense", "هزینه استهلاک", T.EXPENSE, S.OPERATING_EXPENSE, "6200"),
    ("6300", "Financial Expenses", "هزینه‌های مالی", T.EXPENSE, S.OTHER_EXPENSE, "6000"),
    ("6310", "Interest Expense", "هزینه سود", T.EXPENSE, S.OTHER_EXPENSE, "6300"),
    ("6320", "Bank Charges", "کارمزد بانک", T.EXPENSE, S.OTHER_EXPENSE, "6300"),
]
