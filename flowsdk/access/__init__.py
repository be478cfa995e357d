"""HTTP Access API: wire models, conversions, request handling and clients."""