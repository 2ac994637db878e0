"""CookingPro: AI chef backend for recipes and meal plans."""
