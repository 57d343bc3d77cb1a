"""Static constants and mappings for Acure Scan CLI."""

from __future__ import annotations

API_BASE = "https://acure-scan-api.abdabdulziza.workers.dev"

TOKEN_KEY = "userToken"
USER_DATA_KEY = "userData"
SCAN_KEY_PREFIX = "scan_"

# Browser local storage typically allows ~5 MiB of UTF-16 characters per origin.
DEFAULT_STORAGE_CAPACITY = 5 * 1024 * 1024
MAX_CACHED_RECORD_CHARS = 5_000_000
EVICTION_BATCH = 5

COMPRESS_THRESHOLD_CHARS = 500_000

UNKNOWN_SEVERITY = "Unknown"

LABELS = ["blackheads", "cyst", "papules", "pustules", "whiteheads"]

LABEL_DISPLAY = {
    "blackheads": "Blackheads (Komedo Hitam)",
    "cyst": "Cyst (Kista)",
    "papules": "Papules (Jerawat Padat)",
    "pustules": "Pustules (Jerawat Bernanah)",
    "whiteheads": "Whiteheads (Komedo Putih)",
}

RECOMMENDATIONS = {
    "Blackheads (Komedo Hitam)": {
        "treatment": [
            "Gunakan produk dengan salicylic acid (BHA) 0.5-2%",
            "Lakukan double cleansing dengan oil cleanser",
            "Gunakan clay mask 1-2x seminggu",
            "Hindari memencet komedo dengan tangan",
        ],
        "ingredients": ["Salicylic Acid", "Niacinamide", "Retinol", "Clay/Charcoal"],
        "severity": "Ringan",
    },
    "Whiteheads (Komedo Putih)": {
        "treatment": [
            "Gunakan gentle exfoliant dengan AHA/BHA",
            "Aplikasikan retinoid secara bertahap",
            "Gunakan non-comedogenic moisturizer",
            "Konsultasi dengan dermatolog jika tidak membaik",
        ],
        "ingredients": ["Salicylic Acid", "Glycolic Acid", "Retinol", "Niacinamide"],
        "severity": "Ringan",
    },
    "Papules (Jerawat Padat)": {
        "treatment": [
            "Gunakan benzoyl peroxide 2.5-5%",
            "Aplikasikan anti-inflammatory ingredients",
            "Hindari produk yang terlalu harsh",
            "Pertimbangkan konsultasi dermatolog",
        ],
        "ingredients": ["Benzoyl Peroxide", "Niacinamide", "Azelaic Acid", "Tea Tree Oil"],
        "severity": "Sedang",
    },
    "Pustules (Jerawat Bernanah)": {
        "treatment": [
            "Gunakan kombinasi benzoyl peroxide dan salicylic acid",
            "Aplikasikan spot treatment pada area bermasalah",
            "Jaga kebersihan wajah tanpa over-cleansing",
            "Konsultasi dermatolog untuk treatment yang tepat",
        ],
        "ingredients": ["Benzoyl Peroxide", "Salicylic Acid", "Sulfur", "Zinc"],
        "severity": "Sedang-Berat",
    },
    "Cyst (Kista)": {
        "treatment": [
            "SEGERA konsultasi dengan dermatolog",
            "Jangan mencoba memencet atau mengeluarkan sendiri",
            "Gunakan gentle skincare routine",
            "Pertimbangkan treatment medis seperti injeksi kortikosteroid",
        ],
        "ingredients": ["Gentle Cleanser", "Non-comedogenic Moisturizer"],
        "severity": "Berat",
    },
}

DEFAULT_RECOMMENDATION = {
    "treatment": ["Konsultasi dengan dermatolog untuk diagnosis yang tepat"],
    "ingredients": ["Gentle Skincare Products"],
    "severity": "Tidak Diketahui",
}

ARTICLES = [
    {
        "slug": "blackheads",
        "image_url": "/images/artikel/blackheads.jpg",
        "title": "Jerawat Blackheads (Komedo Hitam)",
        "description": (
            "Blackheads atau komedo hitam adalah pori-pori yang tersumbat oleh minyak dan sel "
            "kulit mati yang terpapar udara sehingga berubah warna menjadi hitam."
        ),
    },
    {
        "slug": "whiteheads",
        "image_url": "/images/artikel/whiteheads.jpg",
        "title": "Jerawat Whiteheads (Komedo Putih)",
        "description": (
            "Whiteheads atau komedo putih adalah pori-pori yang tersumbat oleh minyak dan sel "
            "kulit mati yang tertutup lapisan kulit, sehingga tampak sebagai benjolan kecil putih."
        ),
    },
    {
        "slug": "papula",
        "image_url": "/images/artikel/papula.jpg",
        "title": "Jerawat Papula",
        "description": (
            "Papula adalah jenis jerawat yang meradang, terasa sakit saat disentuh, dan terlihat "
            "kemerahan tanpa nanah di permukaan kulit."
        ),
    },
    {
        "slug": "pustula",
        "image_url": "/images/artikel/pustula.jpg",
        "title": "Jerawat Pustula",
        "description": (
            "Pustula adalah jerawat yang berisi nanah di tengahnya, berwarna putih atau kuning, "
            "dan dikelilingi oleh peradangan kemerahan."
        ),
    },
    {
        "slug": "kistik",
        "image_url": "/images/artikel/kistik.jpg",
        "title": "Jerawat Kistik (Cystic Acne)",
        "description": (
            "Jerawat kistik adalah jenis jerawat parah yang terbentuk jauh di bawah permukaan "
            "kulit, berisi nanah, terasa nyeri, dan berisiko meninggalkan bekas luka permanen."
        ),
    },
]

HISTORY_SORTS = ("newest", "oldest", "confidence")
