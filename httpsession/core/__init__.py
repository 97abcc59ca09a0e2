SERVICE_NAME = "httpsession"
