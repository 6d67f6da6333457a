# Byte/megabyte reconciliation for every size estimate (selection and progress).
BYTES_PER_MB = 1024 * 1024
BYTES_PER_GB = 1024 * BYTES_PER_MB
