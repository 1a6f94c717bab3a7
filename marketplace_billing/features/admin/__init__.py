"""Admin feature: pricing plans, coupons, due diligence fees and scouting fee configuration"""
