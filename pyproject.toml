[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "matrixkit"
version = "0.1.0"
description = "Service utilities: local caching, rate limiting, circuit breaking, AES helpers, JSON helpers, rotating logs and more."
requires-python = ">=3.10"
keywords = ["cache", "rate-limiter", "circuit-breaker", "logging", "json", "jwt", "aes", "utilities"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]
dependencies = [
    "cryptography",
    "psutil",
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["matrixkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
