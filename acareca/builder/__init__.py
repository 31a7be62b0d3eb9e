"""Form versions and the entries recorded against them."""