"""Profile form options and completeness checks."""

import re

AGE_RANGES = ["under-19", "19-29", "30-39", "40-49", "50-59", "60+"]

GENDERS = {
    "male": "Male/Masculine",
    "female": "Female/Feminine",
    "other": "Other",
    "prefer-not-to-say": "Prefer not to say",
}

DIALECTS = ["Milambo", "Nyanduat"]

EDUCATION_LEVELS = ["primary", "secondary", "tertiary", "graduate", "postgraduate"]

EMPLOYMENT_STATUSES = ["employed", "self-employed", "unemployed"]

# Fields that count towards a complete profile
REQUIRED_FIELDS = [
    "name",
    "age",
    "gender",
    "location",
    "constituency",
    "phone_number",
    "language_dialect",
    "educational_background",
    "employment_status",
]

# Kenyan county slug -> constituency names
COUNTY_CONSTITUENCIES: dict[str, list[str]] = {
    "nairobi": [
        "Dagoretti North", "Dagoretti South", "Embakasi Central", "Embakasi East",
        "Embakasi North", "Embakasi South", "Embakasi West", "Kamukunji", "Kasarani",
        "Kibra", "Lang'ata", "Makadara", "Mathare", "Roysambu", "Ruaraka", "Starehe",
        "Westlands",
    ],
    "mombasa": ["Changamwe", "Jomba", "Kisauni", "Likoni", "Mvita", "Nyali"],
    "kwale": ["Kinango", "Lunga Lunga", "Matuga", "Msambweni"],
    "kilifi": ["Ganze", "Kaloleni", "Kilifi North", "Kilifi South", "Magarini", "Malindi", "Rabai"],
    "tana-river": ["Bura", "Galole", "Garsen"],
    "lamu": ["Lamu East", "Lamu West"],
    "taita-taveta": ["Mwatate", "Taveta", "Voi", "Wundanyi"],
    "garissa": ["Balambala", "Dadaab", "Fafi", "Garissa Township", "Ijara", "Lagdera"],
    "wajir": ["Eldas", "Tarbaj", "Wajir East", "Wajir North", "Wajir South", "Wajir West"],
    "mandera": ["Banissa", "Lafey", "Mandera East", "Mandera North", "Mandera South", "Mandera West"],
    "marsabit": ["Laisamis", "Moyale", "North Horr", "Saku"],
    "isiolo": ["Isiolo North", "Isiolo South"],
    "meru": [
        "Buuri", "Igembe Central", "Igembe North", "Igembe South", "Imenti Central",
        "Imenti North", "Imenti South", "Tigania East", "Tigania West",
    ],
    "tharaka-nithi": ["Chuka/Igambang'ombe", "Maara", "Tharaka"],
    "embu": ["Manyatta", "Mbeere North", "Mbeere South", "Runyenjes"],
    "kitui": [
        "Kitui Central", "Kitui East", "Kitui Rural", "Kitui South", "Kitui West",
        "Mwingi Central", "Mwingi North", "Mwingi West",
    ],
    "machakos": ["Kathiani", "Machakos Town", "Masinga", "Matungulu", "Mavoko", "Mwala", "Yatta"],
    "makueni": ["Kaiti", "Kibwezi East", "Kibwezi West", "Kilome", "Makueni", "Mbooni"],
    "nyandarua": ["Kinangop", "Kipipiri", "Ndaragwa", "Ol Joro Oirowa", "Ol Kalou"],
    "nyeri": ["Kieni", "Mathira", "Mukurweini", "Nyeri Town", "Othaya", "Tetu"],
    "kirinyaga": ["Gichugu", "Kirinyaga Central", "Mwea", "Ndia"],
    "muranga": ["Kandara", "Kangema", "Kigumo", "Kiharu", "Mathioya"],
    "kiambu": [
        "Gatundu North", "Gatundu South", "Githunguri", "Juja", "Kabete", "Kiambaa",
        "Kiambu", "Kikuyu", "Limuru", "Ruiru", "Thika Town", "Lari",
    ],
    "turkana": [
        "Loima", "Turkana Central", "Turkana East", "Turkana North", "Turkana South",
        "Turkana West",
    ],
    "west-pokot": ["Kacheliba", "Kapenguria", "Pokot South", "Sigor"],
    "samburu": ["Samburu East", "Samburu North", "Samburu West"],
    "trans-nzoia": ["Cherangany", "Endebess", "Kwanza", "Saboti"],
    "uasin-gishu": ["Ainabkoi", "Kapseret", "Kesses", "Moiben", "Soy", "Turbo"],
    "elgeyo-marakwet": ["Keiyo North", "Keiyo South", "Marakwet East", "Marakwet West"],
    "nandi": ["Aldai", "Chesumei", "Emgwen", "Mosop", "Nandi Hills", "Tinderet"],
    "baringo": [
        "Baringo Central", "Baringo North", "Baringo South", "Eldama Ravine", "Mogotio",
        "Tiaty",
    ],
    "laikipia": ["Laikipia East", "Laikipia North", "Laikipia West"],
    "nakuru": [
        "Bahati", "Gilgil", "Kuresoi North", "Kuresoi South", "Molo", "Naivasha",
        "Nakuru Town East", "Nakuru Town West", "Njoro", "Rongai", "Subukia",
    ],
    "narok": ["Narok East", "Narok North", "Narok South", "Narok West"],
    "kajiado": ["Kajiado North", "Kajiado Central", "Kajiado East", "Kajiado South", "Kajiado West"],
    "kericho": [
        "Ainamoi", "Belgut", "Bureti", "Kipkelion East", "Kipkelion West", "Sigowet/Soin",
    ],
    "bomet": ["Bomet Central", "Bomet East", "Chepalungu", "Konoin", "Sotik"],
    "kakamega": [
        "Butere", "Ikolomani", "Khwisero", "Likuyani", "Lugari", "Lurambi", "Malava",
        "Matungu", "Mumias East", "Mumias West", "Navakholo", "Shinyalu",
    ],
    "vihiga": ["Emuhaya", "Hamisi", "Luanda", "Sabatia", "Vihiga"],
    "bungoma": [
        "Bumula", "Kabuchai", "Kanduyi", "Kimilili", "Mt. Elgon", "Sirisia", "Tongaren",
        "Webuye East", "Webuye West",
    ],
    "busia": ["Budalangi", "Butula", "Funyula", "Nambale", "Teso North", "Teso South"],
    "siaya": ["Alego Usonga", "Bondo", "Gem", "Rarieda", "Ugenya", "Ugunja"],
    "kisumu": [
        "Kisumu Central", "Kisumu East", "Kisumu West", "Muhoroni", "Nyakach", "Nyando",
        "Seme",
    ],
    "homa-bay": [
        "Homa Bay Town", "Kabondo Kasipul", "Karachuonyo", "Kasipul", "Mbita", "Ndhiwa",
        "Rangwe", "Suba",
    ],
    "migori": [
        "Awendo", "Kuria East", "Kuria West", "Nyatike", "Rongo", "Suna East", "Suna West",
        "Uriri",
    ],
    "kisii": [
        "Bobasi", "Bomachoge Borabu", "Bomachoge Chache", "Bonchari", "Kitutu Chache North",
        "Kitutu Chache South", "Nyaribari Chache", "Nyaribari Masaba", "South Mugirango",
    ],
    "nyamira": ["Borabu", "Kitutu Masaba", "North Mugirango", "West Mugirango"],
}


def slugify(name: str) -> str:
    """Lower-case *name* and join words with hyphens ("Homa Bay Town" -> "homa-bay-town")."""
    return re.sub(r"\s+", "-", name.strip().lower())


def missing_fields(profile: dict) -> list[str]:
    return [f for f in REQUIRED_FIELDS if not profile.get(f)]


def completion_percent(profile: dict) -> int:
    """Share of required fields filled in, rounded to a whole percent."""
    filled = len(REQUIRED_FIELDS) - len(missing_fields(profile))
    return round(filled / len(REQUIRED_FIELDS) * 100)
