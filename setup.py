from setuptools import setup, find_packages

setup(
    name="chrome-extension-risk-analyzer",
    version="0.1.0",
    description="Weighted security/privacy risk scoring for Chrome extensions",
    author="debarshi17",
    author_email="your-email@example.com",
    url="https://github.com/debarshi17/chrome-extension-security-analyzer",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={
        "extension_risk": ["eslint.config.mjs"],
        "extension_risk.web": ["templates/*.html"],
    },
    install_requires=[
        "requests>=2.31.0",
        "fastapi>=0.109.0",
        "uvicorn>=0.27.0",
        "python-multipart>=0.0.6",
        "tqdm>=4.66.1",
        "colorama>=0.4.6",
        "python-dotenv>=1.0.0",
        "jinja2>=3.1.2",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "httpx>=0.25.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "extension-risk=extension_risk.analyzer:main",
            "extension-risk-web=extension_risk.web.app:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Security",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
    ],
)
