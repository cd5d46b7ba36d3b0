# 17.10.26
