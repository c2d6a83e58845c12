"""deploy-node-app: scaffold and deploy Node.js projects to Compose or Kubernetes."""

__version__ = "0.1.0"
