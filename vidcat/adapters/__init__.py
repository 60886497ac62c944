"""
Adaptateurs concrets de VidCat.

- storage/ : stockage objet R2 / S3 des miniatures (IAssetStorage)
- cache/ : cache memoire des reponses HTTP
"""
