"""Search Amazon ECR repositories for tags, newest first."""
