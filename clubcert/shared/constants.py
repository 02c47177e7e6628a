from qrcode.constants import ERROR_CORRECT_M

VALIDATION_CODE_PREFIX = "CERT"
VALIDATION_SUFFIX_LENGTH = 4
VERIFY_PATH = "/verify/cert"

PODIUM_SIZE = 3

ACHIEVEMENT_PARTICIPANT = "PARTICIPANT"
# externally ranked (single issuance) labels
RANK_ACHIEVEMENTS = {
    1: "WINNER",
    2: "RUNNER UP",
    3: "2nd RUNNER UP",
}

TEMPLATE_DEFAULT = "DEFAULT"
RANK_TEMPLATES = {
    1: "GOLD",
    2: "SILVER",
    3: "BRONZE",
}

QR_ERROR_CORRECTION = ERROR_CORRECT_M
QR_BOX_SIZE = 10
QR_BORDER = 1
QR_DRAW_SIZE_PT = 100
