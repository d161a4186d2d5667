"""
NIFTY 50 Stock Symbols Configuration

Simplified list of the most heavily weighted NIFTY 50 constituents, used by
the NIFTY50 scan preset for quick scans.
"""

NIFTY50_SYMBOLS = [
    "RELIANCE", "TCS", "HDFCBANK", "INFY", "ICICIBANK",
    "HINDUNILVR", "ITC", "HDFC", "SBIN", "BHARTIARTL",
    "KOTAKBANK", "BAJFINANCE", "AXISBANK", "LT", "ASIANPAINT",
    "HCLTECH", "MARUTI", "SUNPHARMA", "TITAN", "BAJAJFINSV",
    "TATAMOTORS", "ULTRACEMCO", "M&M", "ADANIENT", "TATASTEEL",
    "NTPC", "POWERGRID", "ONGC", "GRASIM", "HINDALCO",
]
