"""Setup configuration for the AgentCore and CDK deployment tools."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="agentcore-deploy-tools",
    version="1.0.0",
    author="Deployment Tools Team",
    description="Deployment and validation tools for AgentCore gateway targets and AWS CDK stacks",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "deploy-gateway-target=deploy_tools.cli:deploy_main",
            "validate-gateway-deployment=deploy_tools.cli:validate_gateway_main",
            "validate-cdk-stack=deploy_tools.cli:validate_stack_main",
        ],
    },
)
