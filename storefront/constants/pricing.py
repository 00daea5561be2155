# Shipping is free from this many physical units (inclusive)
FREE_SHIPPING_THRESHOLD = 3

# Whole currency units (ARS)
FLAT_SHIPPING_FEE = 12000

FEE_MODE_ABSORB = "absorb"
FEE_MODE_PASS_THROUGH = "pass_through"
FEE_MODES = (FEE_MODE_ABSORB, FEE_MODE_PASS_THROUGH)
