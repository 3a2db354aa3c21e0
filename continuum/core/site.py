"""Static clinic details used in pages and emails."""

CLINIC_NAME = "Continuum Clinic"
CLINIC_DESCRIPTION = (
    "London-based veterinary longevity centre providing AI-guided assessments, "
    "personalised protocols, and advanced therapeutics for companion animals worldwide."
)
CLINIC_DOMAIN = "thecontinuumclinic.com"
CLINIC_EMAIL = "info@thecontinuumclinic.com"
CLINIC_PHONE = "+44 20 1234 5678"
CLINIC_ADDRESS = "12 Upper Wimpole Street, London W1G 6LW"
