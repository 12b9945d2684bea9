"""Subcategory to vertical lookup."""

DEFAULT_SUBCATEGORY = "fnb_restaurant"

SUBCATEGORY_TO_VERTICAL = {
    # F&B
    "fnb_restaurant": "fnb",
    "fnb_cafe": "fnb",
    "fnb_pub_bar": "fnb",
    "fnb_delivery_takeout": "fnb",
    # Beauty
    "beauty_hair_salon": "beauty",
    "beauty_nail_shop": "beauty",
    "beauty_skin_care": "beauty",
    "beauty_waxing": "beauty",
    # Medical
    "medical_clinic": "medical",
    "medical_dental": "medical",
    "medical_oriental": "medical",
    "medical_vet": "medical",
    # Education
    "edu_academy": "education",
    "edu_music_art": "education",
    "edu_sports": "education",
    # Fitness
    "fitness_gym": "fitness",
    "fitness_pilates": "fitness",
    "fitness_yoga": "fitness",
    # Real estate
    "real_estate_office": "real_estate",
}



def vertical_for(subcategory: str) -> str:
    return SUBCATEGORY_TO_VERTICAL.get(subcategory, SUBCATEGORY_TO_VERTICAL[DEFAULT_SUBCATEGORY])
